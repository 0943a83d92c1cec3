# selfanypay/main.py

import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from selfanypay.config import Settings
from selfanypay.database import Database
from selfanypay.utils.email import EmailSender
from selfanypay.utils.uploader import CloudinaryUploader

logger = logging.getLogger("selfanypay.app")

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# ---------------- CORS ----------------
DEFAULT_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5175",
    "http://127.0.0.1:5175",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # configure once; uvicorn reload and repeated create_app calls reuse the handler
    if any(getattr(h, "_selfanypay", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATEFMT))
    handler._selfanypay = True
    root.addHandler(handler)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or Settings.from_env()
        configure_logging(resolved.log_level)

        db = Database(resolved.database_url, echo=resolved.database_echo)
        db.create_all()
        logger.info("database_ready")

        app.state.settings = resolved
        app.state.db = db
        app.state.uploader = CloudinaryUploader(
            resolved.cloudinary_cloud_name,
            resolved.cloudinary_upload_preset,
            timeout=resolved.upload_timeout_seconds,
        )
        app.state.mailer = EmailSender(
            resolved.email_host,
            port=resolved.email_port,
            secure=resolved.email_secure,
            user=resolved.email_user,
            password=resolved.email_pass,
            sender=resolved.email_from,
        )
        try:
            yield
        finally:
            db.dispose()
            logger.info("database_disposed")

    app = FastAPI(title="SelfAnyPay Backend", lifespan=lifespan)

    origins = list(DEFAULT_ORIGINS)
    frontend_origin = settings.frontend_origin if settings else os.getenv("FRONTEND_ORIGIN")
    if frontend_origin:
        origins.append(frontend_origin)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(
            "unhandled_error",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=500,
            content={"detail": {"message": "Internal server error"}},
        )

    # ---------------- ROUTERS ----------------
    from selfanypay.auth.auth_router import router as auth_router
    from selfanypay.connections.connection_router import router as connection_router
    from selfanypay.follows.follows_router import router as follows_router
    from selfanypay.home.home_router import router as home_router
    from selfanypay.milestone.milestone_router import router as milestone_router
    from selfanypay.profile.profile_router import router as profile_router
    from selfanypay.profile.user_router import router as user_router
    from selfanypay.project.project_router import router as project_router
    from selfanypay.task.task_router import router as task_router

    app.include_router(auth_router, prefix="/auth")
    # the remaining routers carry their own prefix
    app.include_router(profile_router)
    app.include_router(user_router)
    app.include_router(follows_router)
    app.include_router(connection_router)
    app.include_router(project_router)
    app.include_router(milestone_router)
    app.include_router(task_router)
    app.include_router(home_router)

    # ---------------- HEALTH ----------------
    @app.get("/health")
    def health():
        return {"status": "UP", "message": "Service is healthy"}

    @app.get("/")
    def read_root():
        return {"message": "Backend running successfully"}

    return app


app = create_app()


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run("selfanypay.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
