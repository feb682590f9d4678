"""Tests for profile setup, skill management, profile visibility and search."""


class TestProfileSetup:

    def test_setup_completes_profile(self, alice):
        user = alice["user"]
        assert user["profileCompleted"] is True
        assert [s["skill"] for s in user["skillsOffered"]] == ["Guitar", "Cooking"]
        assert all(s["isApproved"] for s in user["skillsOffered"])
        assert user["availability"]["weekends"] is True
        assert user["availability"]["mornings"] is False
        assert user["profileCompleteness"] == 100

    def test_setup_requires_skills_and_availability(self, client, signup):
        account = signup()
        response = client.put(
            "/api/users/profile/setup",
            headers=account["headers"],
            json={
                "location": "Berlin",
                "skillsOffered": [],
                "skillsWanted": [],
                "availability": {},
                "isPublic": True,
            },
        )
        assert response.status_code == 400
        details = {d["field"]: d["message"] for d in response.json()["details"]}
        assert set(details) == {"skillsOffered", "skillsWanted", "availability"}
        assert details["availability"] == "At least one availability option must be selected"

    def test_setup_requires_auth(self, client):
        response = client.put("/api/users/profile/setup", json={})
        assert response.status_code in (400, 401)


class TestProfileUpdate:

    def test_partial_update_keeps_other_fields(self, client, alice):
        response = client.put("/api/users/profile", headers=alice["headers"], json={"location": "Hamburg"})
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["location"] == "Hamburg"
        assert user["name"] == "Alice Example"
        assert len(user["skillsOffered"]) == 2

    def test_replace_skill_lists_and_availability(self, client, alice):
        response = client.put(
            "/api/users/profile",
            headers=alice["headers"],
            json={
                "skillsOffered": [{"skill": "Piano"}],
                "availability": {"mornings": True},
                "isPublic": False,
            },
        )
        user = response.json()["user"]
        assert [s["skill"] for s in user["skillsOffered"]] == ["Piano"]
        assert user["availability"] == {
            "weekdays": False, "weekends": False, "mornings": True, "afternoons": False, "evenings": False,
        }
        assert user["isPublic"] is False

    def test_short_name_rejected(self, client, alice):
        response = client.put("/api/users/profile", headers=alice["headers"], json={"name": "A"})
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "name"


class TestSkillEntries:

    def test_add_offered_skill(self, client, alice):
        response = client.post("/api/users/skills/offered", headers=alice["headers"],
                               json={"skill": "Chess", "description": "Openings"})
        assert response.status_code == 200
        assert response.json()["skill"] == {"skill": "Chess", "description": "Openings", "isApproved": True}

        profile = client.get("/api/users/profile", headers=alice["headers"]).json()["user"]
        assert [s["skill"] for s in profile["skillsOffered"]] == ["Guitar", "Cooking", "Chess"]

    def test_duplicate_skill_is_case_insensitive(self, client, alice):
        response = client.post("/api/users/skills/offered", headers=alice["headers"], json={"skill": "  guitar "})
        assert response.status_code == 400
        assert response.json()["error"] == "skill_exists"

        response = client.post("/api/users/skills/wanted", headers=alice["headers"], json={"skill": "SPANISH"})
        assert response.status_code == 400

    def test_remove_skill_by_index(self, client, alice):
        response = client.delete("/api/users/skills/offered/0", headers=alice["headers"])
        assert response.status_code == 200

        profile = client.get("/api/users/profile", headers=alice["headers"]).json()["user"]
        assert [s["skill"] for s in profile["skillsOffered"]] == ["Cooking"]

    def test_remove_out_of_range(self, client, alice):
        for index in (2, -1):
            response = client.delete(f"/api/users/skills/offered/{index}", headers=alice["headers"])
            assert response.status_code == 400
            assert response.json()["error"] == "invalid_index"

    def test_remove_non_numeric_index(self, client, alice):
        response = client.delete("/api/users/skills/wanted/first", headers=alice["headers"])
        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"


class TestProfileVisibility:

    def test_private_profile_returns_stub(self, client, make_user, bob):
        hidden = make_user("Hidden Person", "hidden@example.com", is_public=False)

        response = client.get(f"/api/users/{hidden['id']}", headers=bob["headers"])
        assert response.status_code == 200
        assert response.json()["user"] == {"id": hidden["id"], "name": "Hidden Person", "isPublic": False}

        anonymous = client.get(f"/api/users/{hidden['id']}")
        assert anonymous.json()["user"] == {"id": hidden["id"], "name": "Hidden Person", "isPublic": False}

    def test_owner_sees_own_private_profile(self, client, make_user):
        hidden = make_user("Hidden Person", "hidden@example.com", is_public=False)
        user = client.get(f"/api/users/{hidden['id']}", headers=hidden["headers"]).json()["user"]
        assert user["email"] == "hidden@example.com"
        assert user["skillsOffered"]

    def test_public_profile_hides_contact_details(self, client, alice, bob):
        user = client.get(f"/api/users/{alice['id']}", headers=bob["headers"]).json()["user"]
        assert user["name"] == "Alice Example"
        assert "email" not in user
        assert "availability" not in user
        assert [s["skill"] for s in user["skillsOffered"]] == ["Guitar", "Cooking"]

    def test_unknown_user(self, client):
        response = client.get("/api/users/does-not-exist")
        assert response.status_code == 404
        assert response.json()["error"] == "user_not_found"


class TestSearch:

    def test_search_excludes_caller_private_and_incomplete(self, client, alice, bob, make_user, signup):
        make_user("Hidden Person", "hidden@example.com", is_public=False)
        signup(name="Newcomer", email="new@example.com")

        response = client.get("/api/users", headers=alice["headers"])
        assert response.status_code == 200
        names = [u["name"] for u in response.json()["users"]]
        assert names == ["Bob Example"]

    def test_search_by_skill_and_location(self, client, alice, bob, carol):
        by_skill = client.get("/api/users", params={"skill": "span"}).json()
        assert [u["name"] for u in by_skill["users"]] == ["Bob Example"]
        assert by_skill["pagination"]["total"] == 1

        by_location = client.get("/api/users", params={"location": "PAR"}).json()
        assert [u["name"] for u in by_location["users"]] == ["Carol Example"]

    def test_wildcards_in_filters_are_literal(self, client, alice, bob, carol):
        for params in ({"skill": "%"}, {"skill": "_"}, {"location": "%"}):
            body = client.get("/api/users", params=params).json()
            assert body["users"] == []
            assert body["pagination"]["total"] == 0

        assert client.get("/api/skills/search", params={"q": "%"}).json()["skills"] == []

    def test_pagination(self, client, alice, bob, carol):
        first = client.get("/api/users", params={"page": 1, "limit": 2}).json()
        second = client.get("/api/users", params={"page": 2, "limit": 2}).json()
        assert len(first["users"]) == 2
        assert len(second["users"]) == 1
        assert first["pagination"]["pages"] == 2
        ids = {u["id"] for u in first["users"]} | {u["id"] for u in second["users"]}
        assert ids == {alice["id"], bob["id"], carol["id"]}
