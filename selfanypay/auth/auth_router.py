# selfanypay/auth/auth_router.py

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from selfanypay.auth import auth_service
from selfanypay.auth.security import get_current_user
from selfanypay.config import Settings, get_settings
from selfanypay.database import get_db
from selfanypay.errors import ServiceError, to_http_exception
from selfanypay.models.user import User
from selfanypay.schemas.auth_schema import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    ResetPasswordRequest,
    UserRead,
    VerifyEmailRequest,
)
from selfanypay.schemas.common_schema import MessageResponse
from selfanypay.utils.email import EmailSender, get_mailer

router = APIRouter(tags=["auth"])


# ================= ROUTES =================
@router.post("/register", status_code=201, response_model=RegisterResponse)
def register_user(
    request: RegisterRequest,
    db: Session = Depends(get_db),
    mailer: EmailSender = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    try:
        user = auth_service.register_user(db, data=request, mailer=mailer, settings=settings)
    except ServiceError as exc:
        raise to_http_exception(exc)

    return {
        "message": "User registered. Check your email for the verification code.",
        "user": user,
    }


@router.post("/verify-email", response_model=AuthResponse)
def verify_email(
    request: VerifyEmailRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        user, token = auth_service.verify_email(
            db, email=request.email, code=request.code, settings=settings
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"user": user, "access_token": token, "token_type": "bearer"}


@router.post("/resend-verification", response_model=MessageResponse)
def resend_verification(
    request: ResendVerificationRequest,
    db: Session = Depends(get_db),
    mailer: EmailSender = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    try:
        auth_service.resend_verification_code(
            db, email=request.email, mailer=mailer, settings=settings
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "A new verification code was sent."}


@router.post("/login", response_model=AuthResponse)
def login(
    request: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        user, token = auth_service.login_user(
            db, email=request.email, password=request.password, settings=settings
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"user": user, "access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserRead)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    req: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: EmailSender = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
):
    """
    IMPORTANT:
    - same answer whether or not the email exists
    - anti user-enumeration
    """
    auth_service.forgot_password(db, email=req.email, mailer=mailer, settings=settings)
    return {"message": "If the email exists, a reset code was sent."}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    req: ResetPasswordRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    try:
        auth_service.reset_password(
            db,
            email=req.email,
            code=req.code,
            new_password=req.new_password,
            settings=settings,
        )
    except ServiceError as exc:
        raise to_http_exception(exc)
    return {"message": "Password updated successfully"}
