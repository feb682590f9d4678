"""Tests for direct conversations, messaging and read tracking."""

import pytest


@pytest.fixture
def conversation_id(client, alice, bob):
    response = client.post("/api/conversations", headers=alice["headers"], json={"participantId": bob["id"]})
    assert response.status_code == 201, response.text
    return response.json()["conversationId"]


def send(client, account, conversation_id, content, **extra):
    response = client.post(f"/api/conversations/{conversation_id}/messages",
                           headers=account["headers"], json={"content": content, **extra})
    assert response.status_code == 201, response.text
    return response.json()["messageData"]


def summary_for(client, account, conversation_id):
    conversations = client.get("/api/conversations", headers=account["headers"]).json()["conversations"]
    return next(c for c in conversations if c["id"] == conversation_id)


class TestCreate:

    def test_create_is_idempotent_per_pair(self, client, conversation_id, alice, bob):
        # Same pair from the other side
        response = client.post("/api/conversations", headers=bob["headers"], json={"participantId": alice["id"]})
        assert response.status_code == 200
        assert response.json()["conversationId"] == conversation_id

        assert len(client.get("/api/conversations", headers=alice["headers"]).json()["conversations"]) == 1

    def test_initial_message(self, client, alice, bob):
        response = client.post("/api/conversations", headers=alice["headers"],
                               json={"participantId": bob["id"], "initialMessage": "Hola Bob"})
        conversation_id = response.json()["conversationId"]

        summary = summary_for(client, bob, conversation_id)
        assert summary["messageCount"] == 1
        assert summary["unreadCount"] == 1
        assert summary["lastMessage"]["content"] == "Hola Bob"
        assert summary["lastMessage"]["sender"] == alice["id"]
        assert summary["otherUser"]["name"] == "Alice Example"
        assert summary["swapRequest"] is None

    def test_conversation_with_self(self, client, alice):
        response = client.post("/api/conversations", headers=alice["headers"], json={"participantId": alice["id"]})
        assert response.status_code == 400

    def test_unknown_participant(self, client, alice):
        response = client.post("/api/conversations", headers=alice["headers"], json={"participantId": "ghost"})
        assert response.status_code == 404
        assert response.json()["error"] == "user_not_found"


class TestMessages:

    def test_last_message_tracks_tail(self, client, conversation_id, alice, bob):
        for n in range(1, 4):
            send(client, alice, conversation_id, f"message {n}")
        send(client, bob, conversation_id, "reply")

        summary = summary_for(client, alice, conversation_id)
        assert summary["messageCount"] == 4
        assert summary["lastMessage"]["content"] == "reply"
        assert summary["lastMessage"]["sender"] == bob["id"]

    def test_message_fields(self, client, conversation_id, alice):
        message = send(client, alice, conversation_id, "hello")
        assert message["senderId"] == alice["id"]
        assert message["type"] == "text"
        assert message["status"] == "sent"
        assert message["fileUrl"] is None

    def test_file_message(self, client, conversation_id, alice):
        message = send(client, alice, conversation_id, "notes", type="file",
                       fileUrl="https://files.example.com/notes.pdf", fileName="notes.pdf")
        assert message["type"] == "file"
        assert message["fileName"] == "notes.pdf"

    def test_file_fields_dropped_for_text(self, client, conversation_id, alice):
        message = send(client, alice, conversation_id, "text only", fileUrl="https://files.example.com/x")
        assert message["fileUrl"] is None

    def test_system_type_not_accepted(self, client, conversation_id, alice):
        response = client.post(f"/api/conversations/{conversation_id}/messages", headers=alice["headers"],
                               json={"content": "fake", "type": "system"})
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "type"

    @pytest.mark.parametrize("content", ["", "x" * 2001])
    def test_content_length(self, client, conversation_id, alice, content):
        response = client.post(f"/api/conversations/{conversation_id}/messages", headers=alice["headers"],
                               json={"content": content})
        assert response.status_code == 400

    def test_non_participant_rejected(self, client, conversation_id, carol):
        response = client.post(f"/api/conversations/{conversation_id}/messages", headers=carol["headers"],
                               json={"content": "let me in"})
        assert response.status_code == 403
        assert client.get(f"/api/conversations/{conversation_id}", headers=carol["headers"]).status_code == 403
        assert client.put(f"/api/conversations/{conversation_id}/read", headers=carol["headers"]).status_code == 403

    def test_unknown_conversation(self, client, alice):
        response = client.get("/api/conversations/missing", headers=alice["headers"])
        assert response.status_code == 404
        assert response.json()["error"] == "conversation_not_found"


class TestReading:

    def test_fetch_marks_other_side_read(self, client, conversation_id, alice, bob):
        send(client, alice, conversation_id, "one")
        send(client, alice, conversation_id, "two")
        send(client, bob, conversation_id, "three")

        assert summary_for(client, bob, conversation_id)["unreadCount"] == 2

        client.get(f"/api/conversations/{conversation_id}", headers=bob["headers"])
        assert summary_for(client, bob, conversation_id)["unreadCount"] == 0

        again = client.get(f"/api/conversations/{conversation_id}", headers=bob["headers"]).json()
        statuses = {m["content"]: m["status"] for m in again["conversation"]["messages"]}
        assert statuses == {"one": "read", "two": "read", "three": "sent"}

        # Alice still has Bob's message unread
        assert summary_for(client, alice, conversation_id)["unreadCount"] == 1

    def test_mark_read_reports_count(self, client, conversation_id, alice, bob):
        send(client, alice, conversation_id, "one")
        send(client, alice, conversation_id, "two")

        response = client.put(f"/api/conversations/{conversation_id}/read", headers=bob["headers"])
        assert response.json()["updatedCount"] == 2

        response = client.put(f"/api/conversations/{conversation_id}/read", headers=bob["headers"])
        assert response.json()["updatedCount"] == 0

    def test_pages_from_the_tail(self, client, conversation_id, alice):
        for n in range(1, 6):
            send(client, alice, conversation_id, f"m{n}")

        def page(number):
            body = client.get(f"/api/conversations/{conversation_id}", headers=alice["headers"],
                              params={"page": number, "limit": 2}).json()["conversation"]
            return [m["content"] for m in body["messages"]], body["pagination"]

        messages, pagination = page(1)
        assert messages == ["m4", "m5"]
        assert pagination["total"] == 5
        assert pagination["hasMore"] is True

        messages, pagination = page(3)
        assert messages == ["m1"]
        assert pagination["hasMore"] is False

        messages, pagination = page(4)
        assert messages == []
        assert pagination["hasMore"] is False

    def test_detail_lists_participants(self, client, conversation_id, alice, bob):
        body = client.get(f"/api/conversations/{conversation_id}", headers=alice["headers"]).json()["conversation"]
        assert {p["id"] for p in body["participants"]} == {alice["id"], bob["id"]}
        assert body["otherUser"]["id"] == bob["id"]


def test_list_orders_by_latest_activity(client, alice, bob, carol):
    with_bob = client.post("/api/conversations", headers=alice["headers"],
                           json={"participantId": bob["id"]}).json()["conversationId"]
    with_carol = client.post("/api/conversations", headers=alice["headers"],
                             json={"participantId": carol["id"]}).json()["conversationId"]
    send(client, bob, with_bob, "newest")

    conversations = client.get("/api/conversations", headers=alice["headers"]).json()["conversations"]
    assert [c["id"] for c in conversations] == [with_bob, with_carol]
