from datetime import timedelta

import pytest

from selfanypay.database import utcnow
from selfanypay.models.biodata import Biodata
from selfanypay.models.user import User

PASSWORD = "Str0ng!pass"


def register(client, **overrides):
    payload = {
        "full_name": "Ana Pop",
        "email": "ana@selfany.io",
        "username": "ana",
        "password": PASSWORD,
        "confirm_password": PASSWORD,
    }
    payload.update(overrides)
    return client.post("/auth/register", json=payload)


def sent_code(mailer_method) -> str:
    # positional call: (email, code, full_name, minutes)
    return mailer_method.call_args.args[1]


class TestRegister:
    def test_register_sends_code_and_creates_biodata(self, client, mailer, api_db):
        response = register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["user"]["is_verified"] is False
        assert "access_token" not in body
        mailer.send_verification_code.assert_called_once()
        assert len(sent_code(mailer.send_verification_code)) == 6

        user = api_db.query(User).filter(User.email == "ana@selfany.io").one()
        assert api_db.query(Biodata).filter(Biodata.user_id == user.id).count() == 1

    def test_duplicate_email(self, client):
        register(client)
        response = register(client, username="other")
        assert response.status_code == 400
        assert response.json()["detail"]["fields"] == ["email"]

    def test_duplicate_username(self, client):
        register(client)
        response = register(client, email="second@selfany.io")
        assert response.status_code == 400

    @pytest.mark.parametrize("password", ["short1!", "nouppercase1!", "NoDigits!!", "NoSymbol123"])
    def test_weak_password(self, client, password):
        response = register(client, password=password, confirm_password=password)
        assert response.status_code == 422

    def test_password_mismatch(self, client):
        assert register(client, confirm_password="Other!pass1").status_code == 422


class TestVerifyAndLogin:
    def test_full_flow(self, client, mailer):
        register(client)
        code = sent_code(mailer.send_verification_code)

        blocked = client.post("/auth/login", json={"email": "ana@selfany.io", "password": PASSWORD})
        assert blocked.status_code == 401

        verified = client.post("/auth/verify-email", json={"email": "ana@selfany.io", "code": code})
        assert verified.status_code == 200
        assert verified.json()["user"]["is_verified"] is True

        login = client.post("/auth/login", json={"email": "ana@selfany.io", "password": PASSWORD})
        assert login.status_code == 200
        token = login.json()["access_token"]
        assert login.json()["token_type"] == "bearer"

        me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200
        assert me.json()["username"] == "ana"

    def test_wrong_code(self, client, mailer):
        register(client)
        code = sent_code(mailer.send_verification_code)
        wrong = "000000" if code != "000000" else "111111"

        response = client.post("/auth/verify-email", json={"email": "ana@selfany.io", "code": wrong})
        assert response.status_code == 400

    def test_expired_code(self, client, mailer, api_db):
        register(client)
        code = sent_code(mailer.send_verification_code)
        user = api_db.query(User).filter(User.email == "ana@selfany.io").one()
        user.verification_code_expires = utcnow() - timedelta(minutes=1)
        api_db.commit()

        response = client.post("/auth/verify-email", json={"email": "ana@selfany.io", "code": code})
        assert response.status_code == 400

    def test_resend_replaces_code(self, client, mailer):
        register(client)
        response = client.post("/auth/resend-verification", json={"email": "ana@selfany.io"})
        assert response.status_code == 200
        assert mailer.send_verification_code.call_count == 2

    def test_same_error_for_unknown_email_and_bad_password(self, client, seed):
        seed.user(username="known")
        unknown = client.post("/auth/login", json={"email": "ghost@selfany.io", "password": PASSWORD})
        bad = client.post("/auth/login", json={"email": "known@selfany.io", "password": "Wr0ng!pass"})

        assert unknown.status_code == bad.status_code == 401
        assert unknown.json() == bad.json() == {"detail": {"message": "Invalid credentials"}}

    def test_me_requires_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"

    def test_garbage_token(self, client):
        response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401


class TestPasswordReset:
    def test_unknown_email_gets_the_same_answer(self, client, mailer):
        response = client.post("/auth/forgot-password", json={"email": "ghost@selfany.io"})
        assert response.status_code == 200
        mailer.send_password_reset_code.assert_not_called()

    def test_reset_flow(self, client, seed, mailer):
        seed.user(username="known")
        client.post("/auth/forgot-password", json={"email": "known@selfany.io"})
        code = sent_code(mailer.send_password_reset_code)
        new_password = "N3w!password"

        response = client.post(
            "/auth/reset-password",
            json={
                "email": "known@selfany.io",
                "code": code,
                "new_password": new_password,
                "confirm_password": new_password,
            },
        )
        assert response.status_code == 200

        login = client.post("/auth/login", json={"email": "known@selfany.io", "password": new_password})
        assert login.status_code == 200
