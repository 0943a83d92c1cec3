from datetime import datetime

import pytest

from selfanypay.errors import ConcurrencyError, NotFoundError, ValidationError
from selfanypay.milestone.milestone_service import (
    fetch_project_milestones,
    manage_project_milestones,
)
from selfanypay.models.gallery import GalleryItem
from selfanypay.models.milestone import Milestone
from selfanypay.models.task import Task


@pytest.fixture
def owner(factory):
    return factory.user(username="owner")


@pytest.fixture
def project(factory, owner):
    return factory.project(owner)


def manage(db, project, owner, item):
    return manage_project_milestones(db, project_id=project.id, user_id=owner.id, items=[item])


class TestManageProjectMilestones:
    def test_create_returns_project_with_new_milestone(self, db, project, owner):
        managed = manage(
            db,
            project,
            owner,
            {
                "action": "create",
                "title": "MVP",
                "release_percentage": 50,
                "due_date": "2025-06-01",
                "gallery_items": [{"url": "https://cdn/a.png", "file_type": "image/png"}],
            },
        )

        assert managed.action == "create"
        milestone = managed.milestone
        assert milestone.title == "MVP"
        assert milestone.release_percentage == 50.0
        assert [g.url for g in milestone.gallery_items] == ["https://cdn/a.png"]
        assert milestone.gallery_items[0].project_id == project.id
        assert milestone.gallery_items[0].uploaded_by_user_id == owner.id

    def test_milestones_come_back_ordered_by_due_date(self, db, factory, project, owner):
        factory.milestone(project, title="late", due_date=datetime(2025, 9, 1))
        factory.milestone(project, title="early", due_date=datetime(2025, 2, 1))

        managed = manage(
            db, project, owner,
            {"action": "create", "title": "middle", "release_percentage": 10, "due_date": "2025-05-01"},
        )

        assert [m.title for m in managed.project.milestones] == ["early", "middle", "late"]

    def test_update_touches_only_sent_fields(self, db, factory, project, owner):
        milestone = factory.milestone(project, title="MVP", description="first cut")

        managed = manage(db, project, owner, {"action": "update", "id": milestone.id, "title": "Beta"})

        assert managed.milestone.title == "Beta"
        assert managed.milestone.description == "first cut"
        assert managed.milestone.release_percentage == 50.0

    def test_update_appends_gallery_items(self, db, factory, project, owner):
        milestone = factory.milestone(project)
        manage(
            db, project, owner,
            {"action": "update", "id": milestone.id, "gallery_items": [{"url": "u1", "file_type": "image/png"}]},
        )
        managed = manage(
            db, project, owner,
            {"action": "update", "id": milestone.id, "gallery_items": [{"url": "u2", "file_type": "application/pdf"}]},
        )
        assert sorted(g.url for g in managed.milestone.gallery_items) == ["u1", "u2"]

    def test_delete_cascades_to_tasks_and_gallery(self, db, factory, project, owner):
        milestone = factory.milestone(project)
        member = factory.contributor(project, factory.user())
        factory.task(milestone, member)
        manage(
            db, project, owner,
            {"action": "update", "id": milestone.id, "gallery_items": [{"url": "u1", "file_type": "image/png"}]},
        )

        managed = manage(db, project, owner, {"action": "delete", "id": milestone.id})

        assert managed.action == "delete"
        assert managed.milestone is None
        assert managed.project.milestones == []
        assert db.query(Milestone).count() == 0
        assert db.query(Task).count() == 0
        assert db.query(GalleryItem).count() == 0

    def test_missing_project(self, db, owner):
        with pytest.raises(NotFoundError):
            manage_project_milestones(
                db, project_id="nope", user_id=owner.id, items=[{"action": "delete", "id": "m"}]
            )

    def test_unknown_milestone_is_a_concurrency_error(self, db, project, owner):
        with pytest.raises(ConcurrencyError, match="related record not found"):
            manage(db, project, owner, {"action": "update", "id": "vanished", "title": "x"})

    def test_milestone_of_another_project_is_not_touched(self, db, factory, project, owner):
        other = factory.project(owner, title="Other")
        foreign = factory.milestone(other, title="keep me")

        with pytest.raises(ConcurrencyError):
            manage(db, project, owner, {"action": "delete", "id": foreign.id})

        db.expire_all()
        assert db.get(Milestone, foreign.id).title == "keep me"

    def test_validation_happens_before_any_write(self, db, project, owner):
        with pytest.raises(ValidationError):
            manage(db, project, owner, {"action": "create", "title": "MVP"})
        assert db.query(Milestone).count() == 0


class TestFetchProjectMilestones:
    def test_empty_project(self, db, project):
        assert fetch_project_milestones(db, project_id=project.id).milestones == []

    def test_missing_project(self, db):
        with pytest.raises(NotFoundError):
            fetch_project_milestones(db, project_id="nope")
