# selfanypay/config.py

import os
from typing import Optional

from dotenv import load_dotenv
from fastapi import Request
from pydantic import BaseModel


# ================= ENV =================
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"))
load_dotenv()


class Settings(BaseModel):
    database_url: str = "sqlite:///./app.db"
    database_echo: bool = False

    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 7 * 24 * 60
    verification_code_expire_minutes: int = 15
    bcrypt_rounds: int = 12

    # mail transport (no host -> codes are only logged)
    email_host: Optional[str] = None
    email_port: int = 587
    email_secure: bool = False
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    email_from: str = "no-reply@selfanypay.com"

    github_client_id: Optional[str] = None
    github_client_secret: Optional[str] = None
    github_redirect_uri: Optional[str] = None

    cloudinary_cloud_name: Optional[str] = None
    cloudinary_upload_preset: Optional[str] = None
    upload_timeout_seconds: int = 30

    frontend_origin: Optional[str] = None
    log_level: str = "INFO"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        secret_key = os.getenv("SECRET_KEY")
        if not secret_key:
            raise RuntimeError("SECRET_KEY missing in .env!")

        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite:///./app.db"),
            database_echo=os.getenv("DATABASE_ECHO", "false").lower() == "true",
            secret_key=secret_key,
            algorithm=os.getenv("ALGORITHM", "HS256"),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60))
            ),
            verification_code_expire_minutes=int(
                os.getenv("VERIFICATION_CODE_EXPIRE_MINUTES", "15")
            ),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
            email_host=os.getenv("EMAIL_HOST"),
            email_port=int(os.getenv("EMAIL_PORT", "587")),
            email_secure=os.getenv("EMAIL_SECURE", "false").lower() == "true",
            email_user=os.getenv("EMAIL_USER"),
            email_pass=os.getenv("EMAIL_PASS"),
            email_from=os.getenv("EMAIL_FROM", "no-reply@selfanypay.com"),
            github_client_id=os.getenv("GITHUB_CLIENT_ID"),
            github_client_secret=os.getenv("GITHUB_CLIENT_SECRET"),
            github_redirect_uri=os.getenv("GITHUB_REDIRECT_URI"),
            cloudinary_cloud_name=os.getenv("CLOUDINARY_CLOUD_NAME"),
            cloudinary_upload_preset=os.getenv("CLOUDINARY_UPLOAD_PRESET"),
            upload_timeout_seconds=int(os.getenv("UPLOAD_TIMEOUT_SECONDS", "30")),
            frontend_origin=os.getenv("FRONTEND_ORIGIN"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            port=int(os.getenv("PORT", "8000")),
        )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
