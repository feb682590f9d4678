from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
import logging

from .core.config import CORS_ORIGINS, LOG_LEVEL, is_development
from .core.errors import ApiError, ServiceUnavailable, ValidationFailed
from .routers import admin, auth, conversations, health, requests, skills, users  # Import routers

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="SkillSwap API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error shaping: {"error", "message", "details"?} everywhere ---

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def _field_errors(exc: RequestValidationError):
    details = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        message = err.get("msg", "is invalid")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc) or "body", "message": message})
    return details


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Every failing field is reported at once
    error = ValidationFailed("Please check your input data", details=_field_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(OperationalError)
async def database_unavailable_handler(request: Request, exc: OperationalError):
    logger.error(f"Database unavailable on {request.url.path}: {exc}")
    error = ServiceUnavailable("Database is not available. Service unavailable.")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    message = str(exc) if is_development() else "Something went wrong"
    return JSONResponse(status_code=500, content={"error": "internal_error", "message": message})


@app.get("/", include_in_schema=False)
def root():
    return {"message": "SkillSwap API"}


# Register routers
app.include_router(health.router)
app.include_router(auth.router)  # signup, login, /me
app.include_router(users.router)
app.include_router(skills.router)
app.include_router(requests.router)
app.include_router(conversations.router)
app.include_router(admin.router)


if __name__ == "__main__":
    import os
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
