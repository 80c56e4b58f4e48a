"""
Skill progress service: every read path and the member toggle.

Reads always recompute the view from the store's current catalog, ledger
and admin decision through compute_view; nothing derived is cached or
written back.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from loguru import logger

from skills_wallet.core.errors import LockedError, NotAssignedError, NotFoundError
from skills_wallet.core.progress import AssignmentState, ProgressView, compute_view
from skills_wallet.db.models import MemberSkillAssignment, Skill
from skills_wallet.skills.store import SkillStore


@dataclass
class SkillDetail:
    """A skill as seen by one member: metadata, admin decision and view."""

    skill: Skill
    member_id: str
    assignment: AssignmentState
    view: ProgressView
    assigned_date: datetime | None = None


@dataclass
class ToggleResult:
    """Outcome of a member toggling one content item."""

    content_item_id: str
    is_completed: bool
    view: ProgressView


@dataclass
class MemberRoster:
    """All assignments of one member, for the admin roster."""

    member_id: str
    member_name: str
    skills: list[SkillDetail] = field(default_factory=list)


class SkillProgressService:
    """Member-facing reads and toggles, plus the admin roster."""

    def __init__(self, store: SkillStore):
        self.store = store

    def get_skill_view(self, member_id: str, skill_id: str) -> SkillDetail:
        """
        Detailed view of one assigned skill.

        Raises:
            NotAssignedError: Member has no assignment for the skill
            NotFoundError: Skill does not exist
        """
        assignment = self._require_assignment(member_id, skill_id)
        skill = self.store.get_skill(skill_id)
        if skill is None:
            raise NotFoundError(f"Skill {skill_id} not found")
        return self._detail(skill, assignment)

    def list_member_skills(self, member_id: str) -> list[SkillDetail]:
        """
        Every active skill assigned to the member with its computed view.

        Rejected skills stay listed; their view reports 0%.
        """
        details = []
        for assignment in self.store.list_assignments(member_id=member_id):
            skill = self.store.get_skill(assignment.skill_id)
            if skill is None or not skill.is_active:
                continue
            details.append(self._detail(skill, assignment))
        return details

    def roster(self, member_id: str | None = None) -> list[MemberRoster]:
        """Admin roster: assignments grouped by member, each with its view."""
        assignments = self.store.list_assignments(member_id=member_id)
        names = self.store.get_member_names(sorted({a.member_id for a in assignments}))

        rosters: dict[str, MemberRoster] = {}
        skills: dict[str, Skill | None] = {}
        for assignment in assignments:
            if assignment.skill_id not in skills:
                skills[assignment.skill_id] = self.store.get_skill(assignment.skill_id)
            skill = skills[assignment.skill_id]
            if skill is None:
                continue
            roster = rosters.setdefault(
                assignment.member_id,
                MemberRoster(
                    member_id=assignment.member_id,
                    member_name=names.get(assignment.member_id, "Unknown"),
                ),
            )
            roster.skills.append(self._detail(skill, assignment))
        return list(rosters.values())

    def toggle_completion(self, member_id: str, skill_id: str, content_item_id: str) -> ToggleResult:
        """
        Flip the member's completion flag on one content item.

        A missing ledger record counts as incomplete, so the first toggle
        marks the item complete.

        Raises:
            NotAssignedError: Member has no assignment for the skill
            LockedError: Admin marked the assignment complete
            NotFoundError: Item does not belong to the skill
        """
        assignment = self._require_assignment(member_id, skill_id)
        state = assignment.to_state()
        if state.is_locked:
            logger.info(f"Toggle refused, skill {skill_id} locked for member {member_id}")
            raise LockedError(member_id, skill_id)

        item = self.store.get_content_item(skill_id, content_item_id)
        if item is None:
            raise NotFoundError(f"Content item {content_item_id} not found in skill {skill_id}")

        record = self.store.get_ledger_record(member_id, content_item_id)
        is_completed = not (record is not None and record.is_completed)
        completed_at = datetime.now(UTC) if is_completed else None
        self.store.upsert_ledger_record(member_id, content_item_id, is_completed, completed_at)
        logger.debug(
            f"Member {member_id} toggled {content_item_id} in {skill_id} -> {is_completed}"
        )

        return ToggleResult(
            content_item_id=content_item_id,
            is_completed=is_completed,
            view=self.compute(member_id, skill_id, state),
        )

    def compute(self, member_id: str, skill_id: str, state: AssignmentState) -> ProgressView:
        """Load the current catalog, then the ledger scoped to it, and reconcile."""
        catalog = [item.to_catalog_item() for item in self.store.get_catalog(skill_id)]
        ledger = self.store.get_ledger(member_id, [item.id for item in catalog])
        return compute_view(state, catalog, [record.to_ledger_entry() for record in ledger])

    def _detail(self, skill: Skill, assignment: MemberSkillAssignment) -> SkillDetail:
        state = assignment.to_state()
        return SkillDetail(
            skill=skill,
            member_id=assignment.member_id,
            assignment=state,
            view=self.compute(assignment.member_id, skill.id, state),
            assigned_date=assignment.assigned_date,
        )

    def _require_assignment(self, member_id: str, skill_id: str) -> MemberSkillAssignment:
        assignment = self.store.get_assignment(member_id, skill_id)
        if assignment is None:
            raise NotAssignedError(member_id, skill_id)
        return assignment
