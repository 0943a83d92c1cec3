# selfanypay/utils/email.py
import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from fastapi import Request

logger = logging.getLogger("selfanypay.email")


class EmailSender:
    """Fire-and-forget mail sink.

    Without an SMTP host the message is only logged (local development).
    Delivery failures are logged and never reach the caller.
    """

    def __init__(
        self,
        host: Optional[str],
        port: int = 587,
        secure: bool = False,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "no-reply@selfanypay.com",
    ):
        self.host = host
        self.port = port
        self.secure = secure
        self.user = user
        self.password = password
        self.sender = sender

    def send(self, to: str, subject: str, html_body: str) -> bool:
        if not self.host:
            logger.info("email_not_sent_no_transport", extra={"to": to, "subject": subject})
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html_body, subtype="html")

        try:
            if self.secure:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=10) as smtp:
                    self._deliver(smtp, message)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=10) as smtp:
                    smtp.starttls()
                    self._deliver(smtp, message)
        except (smtplib.SMTPException, OSError):
            logger.exception("email_send_failed", extra={"to": to, "subject": subject})
            return False

        logger.info("email_sent", extra={"to": to, "subject": subject})
        return True

    def _deliver(self, smtp, message: EmailMessage) -> None:
        if self.user and self.password:
            smtp.login(self.user, self.password)
        smtp.send_message(message)

    def send_verification_code(self, email: str, code: str, full_name: str, minutes: int = 15) -> bool:
        html_body = f"""
            <h1>Hello {full_name},</h1>
            <p>Thank you for signing up. Please use the following 6-digit code to verify your account:</p>
            <h2 style="color: #4CAF50;">{code}</h2>
            <p>This code will expire in {minutes} minutes.</p>
            <p>If you did not request this, please ignore this email.</p>
        """
        return self.send(email, "Verify Your Email Address", html_body)

    def send_password_reset_code(self, email: str, code: str, full_name: str, minutes: int = 15) -> bool:
        html_body = f"""
            <h1>Hello {full_name},</h1>
            <p>You requested a password reset. Please use the following 6-digit code to reset your password:</p>
            <h2 style="color: #F44336;">{code}</h2>
            <p>This code will expire in {minutes} minutes.</p>
            <p>If you did not request a password reset, you can safely ignore this email.</p>
        """
        return self.send(email, "Password Reset Request", html_body)


def get_mailer(request: Request) -> EmailSender:
    return request.app.state.mailer
