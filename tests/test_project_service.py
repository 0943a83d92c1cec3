from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from selfanypay.database import Database
from selfanypay.errors import ConcurrencyError, NotFoundError, ValidationError
from selfanypay.models.contributor import Contributor
from selfanypay.models.project import Project, ProjectStatus
from selfanypay.project import project_service
from selfanypay.schemas.project_schema import ManageProjectRequest, ProjectCreate


def project_payload(**overrides):
    data = dict(
        title="Mobile app",
        total_budget=5000,
        start_date="2025-01-01",
        delivery_date="2025-06-30",
        contract_clauses="Milestone based payments",
    )
    data.update(overrides)
    return ProjectCreate(**data)


class TestCreateProject:
    def test_owner_is_never_a_contributor(self, db, factory):
        owner = factory.user()
        dev = factory.user()

        project = project_service.create_project(
            db, owner_id=owner.id, data=project_payload(contributor_ids=[owner.id, dev.id, dev.id])
        )

        assert project.status == ProjectStatus.PENDING
        assert project.is_escrowed is False
        assert [c.user_id for c in project.contributors] == [dev.id]
        assert project.contributors[0].budget_percentage == 0.0

    def test_unknown_contributor_user(self, db, factory):
        owner = factory.user()
        with pytest.raises(ValidationError):
            project_service.create_project(
                db, owner_id=owner.id, data=project_payload(contributor_ids=["ghost"])
            )
        assert db.query(Project).count() == 0


class TestMakeProjectEscrow:
    def test_flips_once(self, db, factory):
        project = factory.project(factory.user())

        activated = project_service.make_project_escrow(db, project_id=project.id)
        assert activated.is_escrowed is True

        with pytest.raises(ValidationError, match="already marked as escrowed"):
            project_service.make_project_escrow(db, project_id=project.id)

    def test_missing_project(self, db):
        with pytest.raises(NotFoundError):
            project_service.make_project_escrow(db, project_id="nope")

    def test_deleted_project_is_not_found(self, db, factory):
        project = factory.project(factory.user(), is_deleted=True)
        with pytest.raises(NotFoundError):
            project_service.make_project_escrow(db, project_id=project.id)

    def test_stale_reader_loses(self, tmp_path, make_factory):
        database = Database(f"sqlite:///{tmp_path / 'escrow.db'}")
        database.create_all()
        first, second = database.session(), database.session()
        try:
            seeded = make_factory(first)
            project = seeded.project(seeded.user())

            # both sessions have seen the project as not escrowed
            assert first.get(Project, project.id).is_escrowed is False
            assert second.get(Project, project.id).is_escrowed is False

            project_service.make_project_escrow(first, project_id=project.id)
            with pytest.raises(ValidationError):
                project_service.make_project_escrow(second, project_id=project.id)
        finally:
            first.close()
            second.close()
            database.dispose()

    def test_concurrent_activations_have_one_winner(self, tmp_path, make_factory):
        database = Database(f"sqlite:///{tmp_path / 'race.db'}")
        database.create_all()
        with database.session() as session:
            seeded = make_factory(session)
            project_id = seeded.project(seeded.user()).id

        def activate(_):
            with database.session() as session:
                try:
                    project_service.make_project_escrow(session, project_id=project_id)
                    return "won"
                except ValidationError:
                    return "rejected"

        with ThreadPoolExecutor(max_workers=8) as pool:
            outcomes = list(pool.map(activate, range(8)))
        database.dispose()

        assert outcomes.count("won") == 1
        assert outcomes.count("rejected") == 7


class TestManageEscrowProject:
    def test_fields_and_contributor_in_one_call(self, db, factory):
        owner = factory.user()
        project = factory.project(owner)
        dev = factory.user()

        updated = project_service.manage_escrow_project(
            db,
            project_id=project.id,
            user_id=owner.id,
            changes=ManageProjectRequest(
                title="Renamed",
                contributors=[{"action": "create", "user_id": dev.id, "role": "designer"}],
            ),
        )

        assert updated.title == "Renamed"
        assert [(c.user_id, c.role, c.budget_percentage) for c in updated.contributors] == [
            (dev.id, "designer", 0.0)
        ]

    def test_contributor_update(self, db, factory):
        owner = factory.user()
        project = factory.project(owner)
        member = factory.contributor(project, factory.user(), role="dev")

        updated = project_service.manage_escrow_project(
            db,
            project_id=project.id,
            user_id=owner.id,
            changes=ManageProjectRequest(
                contributors=[{"action": "update", "id": member.id, "budget_percentage": 30}]
            ),
        )

        assert updated.contributors[0].budget_percentage == 30.0
        assert updated.contributors[0].role == "dev"

    def test_contributor_failure_rolls_back_fields(self, db, factory):
        owner = factory.user()
        project = factory.project(owner, title="Original")

        with pytest.raises(ConcurrencyError):
            project_service.manage_escrow_project(
                db,
                project_id=project.id,
                user_id=owner.id,
                changes=ManageProjectRequest(
                    title="Changed",
                    contributors=[{"action": "delete", "id": "vanished"}],
                ),
            )

        db.expire_all()
        assert db.get(Project, project.id).title == "Original"

    def test_empty_contributor_list_is_rejected(self, db, factory):
        owner = factory.user()
        project = factory.project(owner)
        with pytest.raises(ValidationError, match="exactly one item required"):
            project_service.manage_escrow_project(
                db, project_id=project.id, user_id=owner.id,
                changes=ManageProjectRequest(contributors=[]),
            )

    def test_no_fields(self, db, factory):
        owner = factory.user()
        project = factory.project(owner)
        with pytest.raises(ValidationError, match="no fields provided"):
            project_service.manage_escrow_project(
                db, project_id=project.id, user_id=owner.id, changes=ManageProjectRequest()
            )

    def test_missing_project(self, db, factory):
        with pytest.raises(NotFoundError):
            project_service.manage_escrow_project(
                db, project_id="nope", user_id=factory.user().id,
                changes=ManageProjectRequest(title="x"),
            )


class TestProjectQueries:
    def test_owned_projects_count_contributors_and_skip_deleted(self, db, factory):
        owner = factory.user()
        busy = factory.project(owner, title="busy", created_at=datetime(2025, 3, 1))
        factory.project(owner, title="quiet", created_at=datetime(2025, 1, 1))
        factory.project(owner, title="gone", is_deleted=True)
        factory.contributor(busy, factory.user())
        factory.contributor(busy, factory.user())

        rows = project_service.fetch_user_owned_projects(db, user_id=owner.id)

        assert [(p.title, count) for p, count in rows] == [("busy", 2), ("quiet", 0)]

    def test_recent_contributors_newest_first(self, db, factory):
        project = factory.project(factory.user())
        old = factory.contributor(project, factory.user(), created_at=datetime(2025, 1, 1))
        new = factory.contributor(project, factory.user(), created_at=datetime(2025, 2, 1))

        assert [c.id for c in project_service.fetch_all_contributors(db, project_id=project.id)] == [old.id, new.id]
        recent = project_service.fetch_recently_added_contributors(db, project_id=project.id, limit=1)
        assert [c.id for c in recent] == [new.id]

    def test_contributing_projects(self, db, factory):
        owner, dev = factory.user(), factory.user()
        shared = factory.project(owner, title="shared")
        factory.project(owner, title="private")
        factory.contributor(shared, dev)

        projects = project_service.fetch_user_contributor_projects(db, user_id=dev.id)

        assert [p.title for p in projects] == ["shared"]
        assert projects[0].owner.id == owner.id

    def test_general_contributors_span_live_projects(self, db, factory):
        owner = factory.user()
        first = factory.project(owner)
        gone = factory.project(owner, is_deleted=True)
        factory.contributor(first, factory.user())
        factory.contributor(gone, factory.user())

        contributors = project_service.fetch_general_contributors(db, owner_id=owner.id)

        assert len(contributors) == 1
        assert isinstance(contributors[0], Contributor)
        assert contributors[0].project.id == first.id

    def test_details(self, db, factory):
        owner = factory.user(username="boss")
        project = factory.project(owner)
        factory.contributor(project, factory.user(username="helper"))

        details = project_service.get_project_details(db, project_id=project.id)

        assert details.owner.username == "boss"
        assert details.contributors[0].user.username == "helper"
