"""
Assignment Lifecycle Manager.

Creates and removes (member, skill) assignments, applies admin decisions,
and runs the cascading deletes that keep the completion ledger consistent
with assignments.

Cascade policy:
- remove_assignment / delete_skill delete child rows before parents inside
  the caller's transaction; any store failure aborts the whole cascade.
- prune_orphan_records is advisory cleanup after catalog edits; failures
  are logged and never propagate.

Admin decisions only touch the decision fields (admin_approved, status,
admin_notes). Rejection and completion are independent flags; the
progress engine resolves a simultaneous conflict in favour of rejection.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from loguru import logger

from skills_wallet.core.errors import (
    ForbiddenError,
    InvalidRequestError,
    NotFoundError,
    StoreUnavailableError,
)
from skills_wallet.core.progress import AssignmentStatus
from skills_wallet.db.models import MemberSkillAssignment
from skills_wallet.skills.store import SkillStore


class DecisionAction(str, Enum):
    """Admin actions on an assignment. Values double as URL segments."""

    APPROVE = "approve"  # admin_approved = True
    REJECT = "reject"  # admin_approved = False
    MARK_COMPLETE = "complete"  # status = COMPLETED
    SET_NOTE = "comment"  # admin_notes = note
    CLEAR_DECISION = "clear"  # admin_approved = None
    REOPEN = "reopen"  # status = NOT_STARTED


@dataclass
class AssignmentBatchResult:
    """Result of assigning several skills to one member."""

    member_id: str
    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)


@dataclass
class CascadeResult:
    """Row counts deleted by a cascade, children first."""

    ledger_records: int = 0
    content_items: int = 0
    assignments: int = 0
    skills: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "ledger_records": self.ledger_records,
            "content_items": self.content_items,
            "assignments": self.assignments,
            "skills": self.skills,
        }


class AssignmentLifecycleManager:
    """Orchestrates assignment creation, removal, decisions and cascades."""

    def __init__(self, store: SkillStore):
        self.store = store

    # ========================================
    # Assignment creation
    # ========================================

    def create_assignment(self, member_id: str, skill_id: str) -> tuple[MemberSkillAssignment, bool]:
        """
        Assign a skill to a member. Idempotent per (member, skill).

        Returns:
            Tuple of (assignment, created). created is False when the pair
            was already assigned and nothing changed.

        Raises:
            NotFoundError: Skill does not exist
            ForbiddenError: Skill is deactivated
        """
        existing = self.store.get_assignment(member_id, skill_id)
        if existing is not None:
            return existing, False

        skill = self.store.get_skill(skill_id)
        if skill is None:
            raise NotFoundError(f"Skill {skill_id} not found")
        if not skill.is_active:
            raise ForbiddenError(f"Skill {skill_id} is inactive and cannot be assigned")

        assignment = MemberSkillAssignment(
            member_id=member_id,
            skill_id=skill_id,
            admin_approved=None,
            status=AssignmentStatus.NOT_STARTED.value,
        )
        if not self.store.insert_assignment(assignment):
            # Lost a race with another request assigning the same pair
            return self.store.get_assignment(member_id, skill_id), False
        logger.info(f"Assigned skill {skill_id} to member {member_id}")
        return assignment, True

    def assign_skills(self, member_id: str, skill_ids: Iterable[str]) -> AssignmentBatchResult:
        """Assign several skills; already-assigned ones are reported, not touched."""
        result = AssignmentBatchResult(member_id=member_id)
        for skill_id in dict.fromkeys(skill_ids):
            _, created = self.create_assignment(member_id, skill_id)
            (result.created if created else result.existing).append(skill_id)
        return result

    # ========================================
    # Cascading removal
    # ========================================

    def remove_assignment(self, member_id: str, skill_id: str) -> CascadeResult:
        """
        Remove an assignment and every ledger record of the member for
        the skill's content items.

        Raises:
            NotFoundError: Pair is not assigned
        """
        if self.store.get_assignment(member_id, skill_id) is None:
            raise NotFoundError(f"Skill {skill_id} is not assigned to member {member_id}")

        item_ids = [item.id for item in self.store.get_catalog(skill_id)]
        result = CascadeResult()
        result.ledger_records = self.store.delete_ledger(item_ids, member_id=member_id)
        result.assignments = self.store.delete_assignments(skill_id, member_id=member_id)
        logger.info(
            f"Removed skill {skill_id} from member {member_id} "
            f"({result.ledger_records} ledger records)"
        )
        return result

    def delete_skill(self, skill_id: str) -> CascadeResult:
        """
        Hard delete a skill: ledger records, content items, assignments,
        then the skill itself.

        Raises:
            NotFoundError: Skill does not exist
        """
        if self.store.get_skill(skill_id) is None:
            raise NotFoundError(f"Skill {skill_id} not found")

        item_ids = [item.id for item in self.store.get_catalog(skill_id)]
        result = CascadeResult()
        result.ledger_records = self.store.delete_ledger(item_ids)
        result.content_items = self.store.delete_content_items(item_ids)
        result.assignments = self.store.delete_assignments(skill_id)
        result.skills = self.store.delete_skill(skill_id)
        logger.info(f"Deleted skill {skill_id}: {result.to_dict()}")
        return result

    def prune_orphan_records(self) -> int:
        """
        Delete ledger records whose content item no longer exists.

        Advisory: the progress engine already ignores orphans, so a
        failure is logged and reported as zero rows pruned.
        """
        try:
            pruned = self.store.delete_orphan_ledger()
        except StoreUnavailableError as exc:
            logger.warning(f"Orphan ledger pruning failed, will retry later: {exc}")
            return 0
        if pruned:
            logger.info(f"Pruned {pruned} orphan ledger records")
        return pruned

    # ========================================
    # Admin decisions
    # ========================================

    def admin_decision(
        self,
        member_id: str,
        skill_id: str,
        action: DecisionAction | str,
        note: str | None = None,
    ) -> MemberSkillAssignment:
        """
        Apply one admin action to the decision record of an assignment.

        Never touches the completion ledger.

        Raises:
            InvalidRequestError: Unknown action, or empty note for SET_NOTE
            NotFoundError: Pair is not assigned
        """
        try:
            action = DecisionAction(action)
        except ValueError as exc:
            raise InvalidRequestError(f"Unknown admin action: {action}") from exc

        if action is DecisionAction.SET_NOTE and not (note and note.strip()):
            raise InvalidRequestError("Comment is required")

        assignment = self.store.get_assignment(member_id, skill_id)
        if assignment is None:
            raise NotFoundError(f"Skill {skill_id} is not assigned to member {member_id}")

        if action is DecisionAction.APPROVE:
            assignment.admin_approved = True
        elif action is DecisionAction.REJECT:
            assignment.admin_approved = False
        elif action is DecisionAction.CLEAR_DECISION:
            assignment.admin_approved = None
        elif action is DecisionAction.MARK_COMPLETE:
            assignment.status = AssignmentStatus.COMPLETED.value
        elif action is DecisionAction.REOPEN:
            assignment.status = AssignmentStatus.NOT_STARTED.value
        elif action is DecisionAction.SET_NOTE:
            assignment.admin_notes = note.strip()

        self.store.add_assignment(assignment)
        logger.info(f"Admin {action.value} on skill {skill_id} for member {member_id}")
        return assignment

