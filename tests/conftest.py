from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from selfanypay.auth.security import create_access_token, hash_password
from selfanypay.config import Settings
from selfanypay.database import Database
from selfanypay.main import create_app
from selfanypay.models.contributor import Contributor
from selfanypay.models.milestone import Milestone
from selfanypay.models.project import Project, ProjectStatus
from selfanypay.models.task import Task
from selfanypay.models.user import User
from selfanypay.utils.email import EmailSender
from selfanypay.utils.uploader import CloudinaryUploader

PASSWORD = "Str0ng!pass"
CDN = "https://res.cloudinary.com/demo/image/upload/v1"


class Factory:
    """Creates committed rows on one session."""

    def __init__(self, session, settings):
        self.session = session
        self.settings = settings
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def user(self, *, username=None, email=None, verified=True, password=PASSWORD, **kw):
        n = self._next()
        username = username or f"user{n}"
        full_name = kw.pop("full_name", f"User {n}")
        return self._save(
            User(
                full_name=full_name,
                email=email or f"{username}@selfany.io",
                username=username,
                password_hash=hash_password(password, self.settings.bcrypt_rounds),
                is_verified=verified,
                **kw,
            )
        )

    def project(self, owner, **kw):
        values = dict(
            title="Website rebuild",
            total_budget=1000.0,
            contract_clauses="Pay on delivery",
            start_date=datetime(2025, 1, 1),
            delivery_date=datetime(2025, 12, 31),
            status=ProjectStatus.ACTIVE,
        )
        values.update(kw)
        return self._save(Project(owner_id=owner.id, **values))

    def contributor(self, project, user, **kw):
        kw.setdefault("budget_percentage", 0.0)
        return self._save(Contributor(project_id=project.id, user_id=user.id, **kw))

    def milestone(self, project, **kw):
        values = dict(title="MVP", release_percentage=50.0, due_date=datetime(2025, 6, 1))
        values.update(kw)
        return self._save(Milestone(project_id=project.id, **values))

    def task(self, milestone, contributor, **kw):
        values = dict(
            title="Landing page",
            percentage_of_project=10.0,
            percentage_to_release=20.0,
            due_date=datetime(2025, 5, 1),
        )
        values.update(kw)
        return self._save(
            Task(milestone_id=milestone.id, contributor_id=contributor.id, **values)
        )

    def token(self, user) -> str:
        return create_access_token(user, self.settings)

    def auth(self, user) -> dict:
        return {"Authorization": f"Bearer {self.token(user)}"}


def _fake_upload_many(files, resource_type="auto"):
    return [f"{CDN}/{pending.filename}" for pending in files]


# ---------------- SERVICE LEVEL ----------------
@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite://",
        secret_key="test-secret-key",
        bcrypt_rounds=4,
        cloudinary_cloud_name="demo",
        cloudinary_upload_preset="unsigned",
    )


@pytest.fixture
def db():
    database = Database("sqlite://")
    database.create_all()
    session = database.session()
    yield session
    session.close()
    database.dispose()


@pytest.fixture
def factory(db, settings):
    return Factory(db, settings)


@pytest.fixture
def make_factory(settings):
    return lambda session: Factory(session, settings)


# ---------------- HTTP LEVEL ----------------
@pytest.fixture
def app(settings, tmp_path):
    file_settings = settings.model_copy(
        update={"database_url": f"sqlite:///{tmp_path / 'api.db'}"}
    )
    return create_app(file_settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        uploader = MagicMock(spec=CloudinaryUploader)
        uploader.upload_many.side_effect = _fake_upload_many
        uploader.upload.return_value = f"{CDN}/avatar.png"
        app.state.uploader = uploader
        app.state.mailer = MagicMock(spec=EmailSender)
        yield c


@pytest.fixture
def uploader(client, app):
    return app.state.uploader


@pytest.fixture
def mailer(client, app):
    return app.state.mailer


@pytest.fixture
def api_db(client, app):
    session = app.state.db.session()
    yield session
    session.close()


@pytest.fixture
def seed(api_db, app):
    return Factory(api_db, app.state.settings)
