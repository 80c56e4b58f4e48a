"""
Unit tests for AssignmentLifecycleManager.

Covers idempotent assignment, cascading removal, admin decisions and
orphan pruning.
"""

from unittest.mock import Mock

import pytest
from sqlalchemy.orm import sessionmaker

from skills_wallet.core.errors import (
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    StoreUnavailableError,
)
from skills_wallet.core.progress import ApprovalState, AssignmentStatus
from skills_wallet.db.database import build_engine, init_db
from skills_wallet.db.models import ContentCompletionRecord
from skills_wallet.skills.catalog import SkillCatalog
from skills_wallet.skills.lifecycle import AssignmentLifecycleManager, DecisionAction
from skills_wallet.skills.store import SqlAlchemySkillStore

MEMBER = "member-1"


@pytest.fixture
def skill(make_skill):
    return make_skill(item_count=3)


@pytest.fixture
def item_ids(store, skill):
    return [item.id for item in store.get_catalog(skill.id)]


def mark_all(progress_service, member_id, skill_id, item_ids):
    for item_id in item_ids:
        progress_service.toggle_completion(member_id, skill_id, item_id)


class TestCreateAssignment:
    def test_new_assignment_starts_undecided(self, lifecycle, skill):
        assignment, created = lifecycle.create_assignment(MEMBER, skill.id)

        assert created is True
        assert assignment.admin_approved is None
        assert assignment.status == AssignmentStatus.NOT_STARTED.value
        assert assignment.to_state().approval is ApprovalState.UNSET

    def test_assigning_twice_is_a_no_op(self, lifecycle, store, skill):
        first, _ = lifecycle.create_assignment(MEMBER, skill.id)
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.REJECT)

        second, created = lifecycle.create_assignment(MEMBER, skill.id)

        assert created is False
        assert second.id == first.id
        assert second.admin_approved is False
        assert len(store.list_assignments(member_id=MEMBER)) == 1

    def test_unknown_skill_is_not_found(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.create_assignment(MEMBER, "skill-missing")

    def test_inactive_skill_cannot_be_assigned(self, lifecycle, catalog, skill):
        catalog.deactivate_skill(skill.id)
        with pytest.raises(ForbiddenError):
            lifecycle.create_assignment(MEMBER, skill.id)

    def test_assign_skills_reports_created_and_existing(self, lifecycle, make_skill, skill):
        other = make_skill(name="Inquiry", item_count=1)
        lifecycle.create_assignment(MEMBER, skill.id)

        result = lifecycle.assign_skills(MEMBER, [skill.id, other.id, other.id])

        assert result.created == [other.id]
        assert result.existing == [skill.id]


class TestRemoveAssignment:
    def test_cascade_deletes_member_ledger_for_skill_only(
        self, lifecycle, progress_service, store, make_skill, skill, item_ids
    ):
        other = make_skill(name="Inquiry", item_count=2)
        other_ids = [item.id for item in store.get_catalog(other.id)]
        lifecycle.assign_skills(MEMBER, [skill.id, other.id])
        lifecycle.create_assignment("member-2", skill.id)
        mark_all(progress_service, MEMBER, skill.id, item_ids)
        mark_all(progress_service, MEMBER, other.id, other_ids)
        mark_all(progress_service, "member-2", skill.id, item_ids)

        result = lifecycle.remove_assignment(MEMBER, skill.id)

        assert result.assignments == 1
        assert result.ledger_records == 3
        assert store.get_assignment(MEMBER, skill.id) is None
        assert store.get_ledger(MEMBER, item_ids) == []
        # Other skill of the same member and same skill of another member survive
        assert len(store.get_ledger(MEMBER, other_ids)) == 2
        assert len(store.get_ledger("member-2", item_ids)) == 3

    def test_reassigning_after_removal_starts_from_zero(
        self, lifecycle, progress_service, skill, item_ids
    ):
        lifecycle.create_assignment(MEMBER, skill.id)
        mark_all(progress_service, MEMBER, skill.id, item_ids)
        lifecycle.remove_assignment(MEMBER, skill.id)

        lifecycle.create_assignment(MEMBER, skill.id)
        view = progress_service.get_skill_view(MEMBER, skill.id).view
        assert view.progress == 0

    def test_removing_missing_assignment_is_not_found(self, lifecycle, skill):
        with pytest.raises(NotFoundError):
            lifecycle.remove_assignment(MEMBER, skill.id)


class TestAdminDecision:
    @pytest.fixture(autouse=True)
    def assigned(self, lifecycle, skill):
        lifecycle.create_assignment(MEMBER, skill.id)

    def test_reject_keeps_status(self, lifecycle, skill):
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.MARK_COMPLETE)
        assignment = lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.REJECT)

        assert assignment.admin_approved is False
        assert assignment.status == AssignmentStatus.COMPLETED.value

    def test_mark_complete_keeps_rejection(self, lifecycle, progress_service, skill):
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.REJECT)
        assignment = lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.MARK_COMPLETE)

        assert assignment.admin_approved is False
        assert assignment.status == AssignmentStatus.COMPLETED.value
        # Rejection wins until it is cleared
        assert progress_service.get_skill_view(MEMBER, skill.id).view.progress == 0

        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.CLEAR_DECISION)
        assert progress_service.get_skill_view(MEMBER, skill.id).view.progress == 100

    def test_decisions_never_touch_the_ledger(self, lifecycle, progress_service, store, skill, item_ids):
        progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])
        before = [(r.content_item_id, r.is_completed) for r in store.get_ledger(MEMBER, item_ids)]

        for action in DecisionAction:
            lifecycle.admin_decision(MEMBER, skill.id, action, note="noted")

        after = [(r.content_item_id, r.is_completed) for r in store.get_ledger(MEMBER, item_ids)]
        assert after == before

    def test_actions_accept_url_strings(self, lifecycle, skill):
        assignment = lifecycle.admin_decision(MEMBER, skill.id, "complete")
        assert assignment.status == AssignmentStatus.COMPLETED.value

    def test_unknown_action_is_invalid(self, lifecycle, skill):
        with pytest.raises(InvalidRequestError):
            lifecycle.admin_decision(MEMBER, skill.id, "promote")

    @pytest.mark.parametrize("note", [None, "", "   "])
    def test_empty_comment_is_invalid(self, lifecycle, skill, note):
        with pytest.raises(InvalidRequestError):
            lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.SET_NOTE, note=note)

    def test_decision_on_unassigned_pair_is_not_found(self, lifecycle, skill):
        with pytest.raises(NotFoundError):
            lifecycle.admin_decision("member-2", skill.id, DecisionAction.APPROVE)


class TestDeleteSkill:
    def test_hard_delete_cascades_everything(self, lifecycle, progress_service, store, skill, item_ids):
        lifecycle.create_assignment(MEMBER, skill.id)
        lifecycle.create_assignment("member-2", skill.id)
        mark_all(progress_service, MEMBER, skill.id, item_ids)

        result = lifecycle.delete_skill(skill.id)

        assert result.to_dict() == {
            "ledger_records": 3,
            "content_items": 3,
            "assignments": 2,
            "skills": 1,
        }
        assert store.get_skill(skill.id) is None
        assert store.get_catalog(skill.id) == []
        assert store.list_assignments(skill_id=skill.id) == []
        assert store.get_ledger(MEMBER, item_ids) == []

    def test_deleting_missing_skill_is_not_found(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.delete_skill("skill-missing")


class TestPruneOrphans:
    def test_prunes_records_of_removed_items_only(self, lifecycle, db_session, store, skill, item_ids):
        db_session.add_all(
            [
                ContentCompletionRecord(member_id=MEMBER, content_item_id=item_ids[0], is_completed=True),
                ContentCompletionRecord(member_id=MEMBER, content_item_id="deleted-item", is_completed=True),
            ]
        )
        db_session.flush()

        assert lifecycle.prune_orphan_records() == 1
        assert store.get_ledger_record(MEMBER, "deleted-item") is None
        assert store.get_ledger_record(MEMBER, item_ids[0]) is not None

    def test_pruning_failure_is_logged_not_raised(self):
        failing_store = Mock()
        failing_store.delete_orphan_ledger.side_effect = StoreUnavailableError("down")

        assert AssignmentLifecycleManager(failing_store).prune_orphan_records() == 0


class TestConcurrentAssignment:
    """Two sessions assigning the same pair; the later insert must be a no-op."""

    @pytest.fixture
    def file_sessions(self, tmp_path):
        engine = build_engine(f"sqlite:///{tmp_path / 'assign.db'}")
        init_db(bind=engine)
        factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
        yield factory
        engine.dispose()

    def test_losing_insert_returns_existing_assignment(self, file_sessions, monkeypatch):
        with file_sessions() as setup:
            skill_id = SkillCatalog(SqlAlchemySkillStore(setup)).create_skill(
                name="Deep Listening", level="Awareness"
            ).skill.id
            other_id = SkillCatalog(SqlAlchemySkillStore(setup)).create_skill(
                name="Inquiry", level="Awareness"
            ).skill.id
            setup.commit()

        session_a = file_sessions()
        session_b = file_sessions()
        store_b = SqlAlchemySkillStore(session_b)

        # B read the pair before A committed it
        real_get = store_b.get_assignment
        stale_reads = {(MEMBER, skill_id)}

        def get_assignment(member_id, skill_id_):
            if (member_id, skill_id_) in stale_reads:
                stale_reads.discard((member_id, skill_id_))
                return None
            return real_get(member_id, skill_id_)

        monkeypatch.setattr(store_b, "get_assignment", get_assignment)

        first, created_a = AssignmentLifecycleManager(SqlAlchemySkillStore(session_a)).create_assignment(
            MEMBER, skill_id
        )
        session_a.commit()
        assert created_a is True

        result = AssignmentLifecycleManager(store_b).assign_skills(MEMBER, [skill_id, other_id])
        session_b.commit()

        assert result.existing == [skill_id]
        assert result.created == [other_id]
        assert store_b.get_assignment(MEMBER, skill_id).id == first.id
        assert len(store_b.list_assignments(member_id=MEMBER)) == 2

        session_a.close()
        session_b.close()
