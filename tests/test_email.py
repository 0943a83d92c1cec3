import smtplib
from unittest.mock import MagicMock, patch

from selfanypay.utils.email import EmailSender


class TestEmailSender:
    def test_without_host_nothing_is_sent(self):
        with patch("selfanypay.utils.email.smtplib.SMTP") as smtp:
            assert EmailSender(None).send_verification_code("a@selfany.io", "123456", "Ana") is False
        smtp.assert_not_called()

    def test_starttls_and_login(self):
        sender = EmailSender("smtp.selfany.io", 587, user="mailer", password="secret")
        server = MagicMock()

        with patch("selfanypay.utils.email.smtplib.SMTP") as smtp:
            smtp.return_value.__enter__.return_value = server
            assert sender.send_password_reset_code("a@selfany.io", "654321", "Ana") is True

        smtp.assert_called_once_with("smtp.selfany.io", 587, timeout=10)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "a@selfany.io"
        assert "654321" in message.get_body(preferencelist=("html",)).get_content()

    def test_failures_are_swallowed(self):
        sender = EmailSender("smtp.selfany.io", 465, secure=True)
        with patch("selfanypay.utils.email.smtplib.SMTP_SSL", side_effect=smtplib.SMTPConnectError(421, "busy")):
            assert sender.send("a@selfany.io", "subject", "<p>hi</p>") is False
