"""
Progress Reconciliation Engine.

Derives a member's status and completion percentage for one assigned skill
from three independently edited inputs:

- the content catalog currently attached to the skill
- the member's completion ledger
- the administrator's decision record for the assignment

Precedence (highest first):
1. Rejected          -> NOT_STARTED, 0%, every item reported incomplete
2. Admin completed   -> COMPLETED, 100%, every item reported complete
3. Calculated        -> completed / total, rounded half up

The engine is pure: callers load the three inputs and every read path
calls ``compute_view`` on whatever snapshot it was given.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class AssignmentStatus(str, Enum):
    """Status of an assignment, stored or resolved."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @classmethod
    def parse(cls, value: str | None) -> AssignmentStatus:
        """Parse a stored status. Missing or unknown values read as NOT_STARTED."""
        if not value:
            return cls.NOT_STARTED
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.NOT_STARTED

    @classmethod
    def from_progress(cls, progress: int) -> AssignmentStatus:
        if progress >= 100:
            return cls.COMPLETED
        if progress > 0:
            return cls.IN_PROGRESS
        return cls.NOT_STARTED


class ApprovalState(str, Enum):
    """Tri-state admin approval flag."""

    APPROVED = "approved"
    REJECTED = "rejected"
    UNSET = "unset"

    @classmethod
    def from_flag(cls, flag: bool | None) -> ApprovalState:
        if flag is None:
            return cls.UNSET
        return cls.APPROVED if flag else cls.REJECTED

    def to_flag(self) -> bool | None:
        if self is ApprovalState.UNSET:
            return None
        return self is ApprovalState.APPROVED


class Resolution(str, Enum):
    """Which precedence rule produced a view."""

    REJECTED = "rejected"
    ADMIN_COMPLETED = "admin_completed"
    CALCULATED = "calculated"


@dataclass(frozen=True)
class AssignmentState:
    """Admin decision record for one (member, skill) assignment."""

    approval: ApprovalState = ApprovalState.UNSET
    status: AssignmentStatus = AssignmentStatus.NOT_STARTED
    admin_notes: str | None = None

    @classmethod
    def from_record(
        cls,
        admin_approved: bool | None,
        status: str | None,
        admin_notes: str | None = None,
    ) -> AssignmentState:
        """Build a state from raw stored columns."""
        return cls(
            approval=ApprovalState.from_flag(admin_approved),
            status=AssignmentStatus.parse(status),
            admin_notes=admin_notes,
        )

    @property
    def is_rejected(self) -> bool:
        return self.approval is ApprovalState.REJECTED

    @property
    def is_admin_completed(self) -> bool:
        """Admin completion only counts when the assignment is not rejected."""
        return self.status is AssignmentStatus.COMPLETED and not self.is_rejected

    @property
    def is_locked(self) -> bool:
        """Member edits are refused while the stored status is COMPLETED."""
        return self.status is AssignmentStatus.COMPLETED


@dataclass(frozen=True)
class CatalogItem:
    """One content item of a skill's catalog."""

    id: str
    title: str
    content_type: str = "OTHER"
    url: str | None = None
    notes: str | None = None
    display_order: int = 0


@dataclass(frozen=True)
class LedgerEntry:
    """A member's completion record for one content item."""

    content_item_id: str
    is_completed: bool
    completed_at: datetime | None = None


@dataclass(frozen=True)
class ItemProgress:
    """Per-item completion as reported in a view."""

    item: CatalogItem
    is_completed: bool
    completed_at: datetime | None = None

    @property
    def id(self) -> str:
        return self.item.id


@dataclass(frozen=True)
class ProgressView:
    """Authoritative progress view for one (member, skill) pair."""

    status: AssignmentStatus
    progress: int
    completed_count: int
    total_count: int
    resolution: Resolution
    locked: bool = False
    items: tuple[ItemProgress, ...] = field(default_factory=tuple)

    @property
    def is_completed(self) -> bool:
        return self.status is AssignmentStatus.COMPLETED

    def item(self, content_item_id: str) -> ItemProgress | None:
        """Look up the reported progress of one item."""
        for entry in self.items:
            if entry.id == content_item_id:
                return entry
        return None


def percent_complete(completed: int, total: int) -> int:
    """
    Integer percentage of completed items, rounded half up.

    Returns 0 for an empty catalog instead of dividing by zero.

    Examples:
        percent_complete(1, 8) == 13   # 12.5 rounds up
        percent_complete(2, 3) == 67
        percent_complete(0, 0) == 0
    """
    if total <= 0:
        return 0
    completed = max(0, min(completed, total))
    # floor(100 * completed / total + 0.5) in exact integer arithmetic
    return (200 * completed + total) // (2 * total)


def compute_view(
    assignment: AssignmentState,
    content_items: Sequence[CatalogItem],
    completion_records: Iterable[LedgerEntry],
) -> ProgressView:
    """
    Reconcile catalog, ledger and admin decision into one view.

    Only the current catalog is iterated, so ledger entries for items that
    were removed from the skill are ignored.

    Args:
        assignment: Admin decision record of the assignment
        content_items: Current catalog of the skill, in display order
        completion_records: Member's ledger entries (any superset is fine)

    Returns:
        ProgressView with per-item completion in catalog order
    """
    total = len(content_items)

    if assignment.is_rejected:
        return ProgressView(
            status=AssignmentStatus.NOT_STARTED,
            progress=0,
            completed_count=0,
            total_count=total,
            resolution=Resolution.REJECTED,
            locked=assignment.is_locked,
            items=tuple(ItemProgress(item=item, is_completed=False) for item in content_items),
        )

    ledger = {entry.content_item_id: entry for entry in completion_records}

    if assignment.is_admin_completed:
        return ProgressView(
            status=AssignmentStatus.COMPLETED,
            progress=100,
            completed_count=total,
            total_count=total,
            resolution=Resolution.ADMIN_COMPLETED,
            locked=True,
            items=tuple(
                ItemProgress(
                    item=item,
                    is_completed=True,
                    completed_at=_completed_at(ledger.get(item.id)),
                )
                for item in content_items
            ),
        )

    items = []
    completed = 0
    for item in content_items:
        entry = ledger.get(item.id)
        done = entry is not None and entry.is_completed
        if done:
            completed += 1
        items.append(
            ItemProgress(item=item, is_completed=done, completed_at=_completed_at(entry))
        )

    progress = percent_complete(completed, total)
    return ProgressView(
        status=AssignmentStatus.from_progress(progress),
        progress=progress,
        completed_count=completed,
        total_count=total,
        resolution=Resolution.CALCULATED,
        locked=False,
        items=tuple(items),
    )


def _completed_at(entry: LedgerEntry | None) -> datetime | None:
    if entry is None or not entry.is_completed:
        return None
    return entry.completed_at
