"""
Unit tests for SkillProgressService: member views, toggles and the roster.

Runs against the in-memory SQLite store from conftest.
"""

import pytest

from skills_wallet.core.errors import LockedError, NotAssignedError, NotFoundError
from skills_wallet.core.progress import AssignmentStatus, Resolution
from skills_wallet.skills.lifecycle import DecisionAction

MEMBER = "member-1"


@pytest.fixture
def skill(make_skill):
    return make_skill(item_count=4)


@pytest.fixture
def item_ids(store, skill):
    return [item.id for item in store.get_catalog(skill.id)]


@pytest.fixture
def assigned(lifecycle, skill):
    assignment, _ = lifecycle.create_assignment(MEMBER, skill.id)
    return assignment


def complete(progress_service, skill, *item_ids):
    for item_id in item_ids:
        progress_service.toggle_completion(MEMBER, skill.id, item_id)


class TestToggleCompletion:
    def test_first_toggle_creates_completed_record(self, progress_service, store, skill, item_ids, assigned):
        result = progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])

        assert result.is_completed is True
        record = store.get_ledger_record(MEMBER, item_ids[0])
        assert record.is_completed is True
        assert record.completed_at is not None
        assert result.view.progress == 25

    def test_double_toggle_restores_original_state(self, progress_service, store, skill, item_ids, assigned):
        progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])
        result = progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])

        assert result.is_completed is False
        record = store.get_ledger_record(MEMBER, item_ids[0])
        assert record.is_completed is False
        assert record.completed_at is None
        assert result.view.progress == 0

    def test_toggle_never_duplicates_records(self, progress_service, store, skill, item_ids, assigned):
        for _ in range(3):
            progress_service.toggle_completion(MEMBER, skill.id, item_ids[1])
        assert len(store.get_ledger(MEMBER, [item_ids[1]])) == 1

    def test_unassigned_skill_is_refused(self, progress_service, store, skill, item_ids):
        with pytest.raises(NotAssignedError):
            progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])
        assert store.get_ledger_record(MEMBER, item_ids[0]) is None

    def test_item_from_other_skill_is_not_found(self, progress_service, store, make_skill, skill, assigned):
        other = make_skill(name="Facilitation", item_count=1)
        foreign_item = store.get_catalog(other.id)[0]

        with pytest.raises(NotFoundError):
            progress_service.toggle_completion(MEMBER, skill.id, foreign_item.id)

    def test_unknown_item_is_not_found(self, progress_service, skill, assigned):
        with pytest.raises(NotFoundError):
            progress_service.toggle_completion(MEMBER, skill.id, "no-such-item")

    def test_admin_completion_locks_toggles(self, progress_service, lifecycle, store, skill, item_ids, assigned):
        complete(progress_service, skill, item_ids[0])
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.MARK_COMPLETE)

        with pytest.raises(LockedError):
            progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])
        assert store.get_ledger_record(MEMBER, item_ids[0]).is_completed is True

    def test_toggle_while_rejected_updates_ledger_but_view_stays_zero(
        self, progress_service, lifecycle, store, skill, item_ids, assigned
    ):
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.REJECT)
        result = progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])

        assert result.is_completed is True
        assert result.view.progress == 0
        assert result.view.resolution is Resolution.REJECTED

    def test_completing_every_item_does_not_lock(self, progress_service, skill, item_ids, assigned):
        complete(progress_service, skill, *item_ids)
        result = progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])

        assert result.view.progress == 75
        assert result.view.status is AssignmentStatus.IN_PROGRESS


class TestScenarios:
    def test_reject_then_clear_restores_member_progress(
        self, progress_service, lifecycle, store, skill, item_ids, assigned
    ):
        # A: 2 of 4 complete
        complete(progress_service, skill, item_ids[0], item_ids[1])
        view = progress_service.get_skill_view(MEMBER, skill.id).view
        assert view.progress == 50
        assert view.status is AssignmentStatus.IN_PROGRESS

        # B: rejection hides progress but keeps the ledger
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.REJECT)
        view = progress_service.get_skill_view(MEMBER, skill.id).view
        assert view.progress == 0
        assert view.status is AssignmentStatus.NOT_STARTED
        assert [entry.is_completed for entry in view.items] == [False] * 4
        assert sum(r.is_completed for r in store.get_ledger(MEMBER, item_ids)) == 2

        # C: clearing the rejection brings the 2 completions back
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.APPROVE)
        view = progress_service.get_skill_view(MEMBER, skill.id).view
        assert view.progress == 50
        assert [entry.is_completed for entry in view.items] == [True, True, False, False]

    def test_mark_complete_then_member_toggle_is_locked(
        self, progress_service, lifecycle, store, skill, item_ids, assigned
    ):
        complete(progress_service, skill, item_ids[0], item_ids[1])
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.MARK_COMPLETE)

        view = progress_service.get_skill_view(MEMBER, skill.id).view
        assert view.progress == 100
        assert all(entry.is_completed for entry in view.items)

        with pytest.raises(LockedError):
            progress_service.toggle_completion(MEMBER, skill.id, item_ids[0])
        ledger = {r.content_item_id: r.is_completed for r in store.get_ledger(MEMBER, item_ids)}
        assert ledger == {item_ids[0]: True, item_ids[1]: True}

    def test_skill_without_content(self, progress_service, lifecycle, make_skill):
        empty = make_skill(name="Presence", item_count=0)
        lifecycle.create_assignment(MEMBER, empty.id)

        view = progress_service.get_skill_view(MEMBER, empty.id).view
        assert view.progress == 0
        assert view.status is AssignmentStatus.NOT_STARTED
        assert view.total_count == 0

    def test_reopen_lifts_lock_and_recalculates(self, progress_service, lifecycle, skill, item_ids, assigned):
        complete(progress_service, skill, item_ids[0])
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.MARK_COMPLETE)
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.REOPEN)

        result = progress_service.toggle_completion(MEMBER, skill.id, item_ids[1])
        assert result.view.progress == 50
        assert result.view.resolution is Resolution.CALCULATED


class TestReads:
    def test_view_of_unassigned_skill_is_forbidden(self, progress_service, skill):
        with pytest.raises(NotAssignedError):
            progress_service.get_skill_view(MEMBER, skill.id)

    def test_view_carries_admin_notes(self, progress_service, lifecycle, skill, assigned):
        lifecycle.admin_decision(MEMBER, skill.id, DecisionAction.SET_NOTE, note="  Great reflection  ")
        detail = progress_service.get_skill_view(MEMBER, skill.id)
        assert detail.assignment.admin_notes == "Great reflection"

    def test_list_member_skills_skips_inactive_but_keeps_rejected(
        self, progress_service, lifecycle, catalog, make_skill, skill, assigned
    ):
        retired = make_skill(name="Old Practice", item_count=1)
        rejected = make_skill(name="Boundaries", item_count=2)
        lifecycle.assign_skills(MEMBER, [retired.id, rejected.id])
        catalog.deactivate_skill(retired.id)
        lifecycle.admin_decision(MEMBER, rejected.id, DecisionAction.REJECT)

        details = {detail.skill.id: detail for detail in progress_service.list_member_skills(MEMBER)}

        assert set(details) == {skill.id, rejected.id}
        assert details[rejected.id].view.progress == 0

    def test_roster_groups_by_member_with_names(self, progress_service, lifecycle, member, make_skill, skill, assigned):
        other_skill = make_skill(name="Holding Space", item_count=2)
        lifecycle.create_assignment(MEMBER, other_skill.id)
        lifecycle.create_assignment("member-2", skill.id)

        rosters = {roster.member_id: roster for roster in progress_service.roster()}

        assert rosters[MEMBER].member_name == "Ada Member"
        assert rosters["member-2"].member_name == "Unknown"
        assert {detail.skill.id for detail in rosters[MEMBER].skills} == {skill.id, other_skill.id}
        assert len(rosters["member-2"].skills) == 1

    def test_roster_filters_by_member(self, progress_service, lifecycle, skill, assigned):
        lifecycle.create_assignment("member-2", skill.id)
        rosters = progress_service.roster(member_id="member-2")
        assert [roster.member_id for roster in rosters] == ["member-2"]
