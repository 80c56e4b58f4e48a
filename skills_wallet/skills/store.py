"""
Record store for the skills services.

SkillStore is the query interface the service layer depends on;
SqlAlchemySkillStore implements it over a SQLAlchemy Session. Store
methods only flush: the caller's session scope owns the transaction.

Every SQLAlchemyError raised by a store call is re-raised as
StoreUnavailableError so callers handle one error type.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Protocol, TypeVar

from loguru import logger
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from skills_wallet.core.errors import StoreUnavailableError
from skills_wallet.db.models import (
    ContentCompletionRecord,
    ContentItem,
    Member,
    MemberSkillAssignment,
    Skill,
)

T = TypeVar("T")


class SkillStore(Protocol):
    """Query interface over skills, catalog, assignments and ledger."""

    # Skills and catalog
    def get_skill(self, skill_id: str) -> Skill | None: ...
    def list_skills(self, active_only: bool = True) -> list[Skill]: ...
    def add_skill(self, skill: Skill) -> Skill: ...
    def delete_skill(self, skill_id: str) -> int: ...
    def count_content(self, skill_id: str) -> int: ...
    def get_catalog(self, skill_id: str) -> list[ContentItem]: ...
    def get_content_item(self, skill_id: str, item_id: str) -> ContentItem | None: ...
    def add_content_item(self, item: ContentItem) -> ContentItem: ...
    def delete_content_items(self, item_ids: Sequence[str]) -> int: ...

    # Assignments
    def get_assignment(self, member_id: str, skill_id: str) -> MemberSkillAssignment | None: ...
    def list_assignments(
        self, member_id: str | None = None, skill_id: str | None = None
    ) -> list[MemberSkillAssignment]: ...
    def add_assignment(self, assignment: MemberSkillAssignment) -> MemberSkillAssignment: ...
    def insert_assignment(self, assignment: MemberSkillAssignment) -> bool: ...
    def delete_assignments(self, skill_id: str, member_id: str | None = None) -> int: ...

    # Ledger
    def get_ledger(self, member_id: str, item_ids: Sequence[str]) -> list[ContentCompletionRecord]: ...
    def get_ledger_record(self, member_id: str, item_id: str) -> ContentCompletionRecord | None: ...
    def upsert_ledger_record(
        self, member_id: str, item_id: str, is_completed: bool, completed_at: datetime | None
    ) -> ContentCompletionRecord: ...
    def delete_ledger(self, item_ids: Sequence[str], member_id: str | None = None) -> int: ...
    def delete_orphan_ledger(self) -> int: ...

    # Members
    def get_member_names(self, member_ids: Sequence[str]) -> dict[str, str]: ...


def store_operation(func_: Callable[..., T]) -> Callable[..., T]:
    """Translate SQLAlchemy failures into StoreUnavailableError."""

    @functools.wraps(func_)
    def wrapper(*args, **kwargs) -> T:
        try:
            return func_(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error(f"Store operation {func_.__name__} failed: {exc}")
            raise StoreUnavailableError(f"Record store failed during {func_.__name__}") from exc

    return wrapper


class SqlAlchemySkillStore:
    """SkillStore backed by a SQLAlchemy Session."""

    def __init__(self, session: Session):
        self.session = session

    # ========================================
    # Skills and catalog
    # ========================================

    @store_operation
    def get_skill(self, skill_id: str) -> Skill | None:
        return self.session.get(Skill, skill_id)

    @store_operation
    def list_skills(self, active_only: bool = True) -> list[Skill]:
        stmt = select(Skill).order_by(Skill.created_at.desc(), Skill.name)
        if active_only:
            stmt = stmt.where(Skill.is_active.is_(True))
        return list(self.session.scalars(stmt))

    @store_operation
    def add_skill(self, skill: Skill) -> Skill:
        self.session.add(skill)
        self.session.flush()
        return skill

    @store_operation
    def delete_skill(self, skill_id: str) -> int:
        result = self.session.execute(
            delete(Skill).where(Skill.id == skill_id).execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    @store_operation
    def count_content(self, skill_id: str) -> int:
        stmt = select(func.count()).select_from(ContentItem).where(ContentItem.skill_id == skill_id)
        return self.session.scalar(stmt) or 0

    @store_operation
    def get_catalog(self, skill_id: str) -> list[ContentItem]:
        stmt = (
            select(ContentItem)
            .where(ContentItem.skill_id == skill_id)
            .order_by(ContentItem.display_order, ContentItem.created_at, ContentItem.id)
        )
        return list(self.session.scalars(stmt))

    @store_operation
    def get_content_item(self, skill_id: str, item_id: str) -> ContentItem | None:
        stmt = select(ContentItem).where(
            ContentItem.id == item_id, ContentItem.skill_id == skill_id
        )
        return self.session.scalars(stmt).first()

    @store_operation
    def add_content_item(self, item: ContentItem) -> ContentItem:
        self.session.add(item)
        self.session.flush()
        return item

    @store_operation
    def delete_content_items(self, item_ids: Sequence[str]) -> int:
        if not item_ids:
            return 0
        result = self.session.execute(
            delete(ContentItem)
            .where(ContentItem.id.in_(list(item_ids)))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    # ========================================
    # Assignments
    # ========================================

    @store_operation
    def get_assignment(self, member_id: str, skill_id: str) -> MemberSkillAssignment | None:
        stmt = select(MemberSkillAssignment).where(
            MemberSkillAssignment.member_id == member_id,
            MemberSkillAssignment.skill_id == skill_id,
        )
        return self.session.scalars(stmt).first()

    @store_operation
    def list_assignments(
        self, member_id: str | None = None, skill_id: str | None = None
    ) -> list[MemberSkillAssignment]:
        stmt = select(MemberSkillAssignment).order_by(
            MemberSkillAssignment.assigned_date.desc(), MemberSkillAssignment.skill_id
        )
        if member_id is not None:
            stmt = stmt.where(MemberSkillAssignment.member_id == member_id)
        if skill_id is not None:
            stmt = stmt.where(MemberSkillAssignment.skill_id == skill_id)
        return list(self.session.scalars(stmt))

    @store_operation
    def add_assignment(self, assignment: MemberSkillAssignment) -> MemberSkillAssignment:
        self.session.add(assignment)
        self.session.flush()
        return assignment

    @store_operation
    def insert_assignment(self, assignment: MemberSkillAssignment) -> bool:
        """
        Insert a new assignment unless the (member, skill) pair already exists.

        Returns False when a concurrent writer inserted the pair first; the
        savepoint keeps the caller's transaction usable.
        """
        try:
            with self.session.begin_nested():
                self.session.add(assignment)
                self.session.flush()
        except IntegrityError:
            logger.info(
                f"Assignment {assignment.member_id}/{assignment.skill_id} already exists, skipping insert"
            )
            return False
        return True

    @store_operation
    def delete_assignments(self, skill_id: str, member_id: str | None = None) -> int:
        stmt = delete(MemberSkillAssignment).where(MemberSkillAssignment.skill_id == skill_id)
        if member_id is not None:
            stmt = stmt.where(MemberSkillAssignment.member_id == member_id)
        result = self.session.execute(stmt.execution_options(synchronize_session="fetch"))
        return result.rowcount or 0

    # ========================================
    # Completion ledger
    # ========================================

    @store_operation
    def get_ledger(self, member_id: str, item_ids: Sequence[str]) -> list[ContentCompletionRecord]:
        if not item_ids:
            return []
        stmt = select(ContentCompletionRecord).where(
            ContentCompletionRecord.member_id == member_id,
            ContentCompletionRecord.content_item_id.in_(list(item_ids)),
        )
        return list(self.session.scalars(stmt))

    @store_operation
    def get_ledger_record(self, member_id: str, item_id: str) -> ContentCompletionRecord | None:
        stmt = select(ContentCompletionRecord).where(
            ContentCompletionRecord.member_id == member_id,
            ContentCompletionRecord.content_item_id == item_id,
        )
        return self.session.scalars(stmt).first()

    @store_operation
    def upsert_ledger_record(
        self, member_id: str, item_id: str, is_completed: bool, completed_at: datetime | None
    ) -> ContentCompletionRecord:
        record = self.get_ledger_record(member_id, item_id)
        if record is None:
            record = ContentCompletionRecord(member_id=member_id, content_item_id=item_id)
            self.session.add(record)
        record.is_completed = is_completed
        record.completed_at = completed_at
        self.session.flush()
        return record

    @store_operation
    def delete_ledger(self, item_ids: Sequence[str], member_id: str | None = None) -> int:
        if not item_ids:
            return 0
        stmt = delete(ContentCompletionRecord).where(
            ContentCompletionRecord.content_item_id.in_(list(item_ids))
        )
        if member_id is not None:
            stmt = stmt.where(ContentCompletionRecord.member_id == member_id)
        result = self.session.execute(stmt.execution_options(synchronize_session="fetch"))
        return result.rowcount or 0

    @store_operation
    def delete_orphan_ledger(self) -> int:
        """Delete ledger rows whose content item no longer exists."""
        live_items = select(ContentItem.id)
        # Savepoint: a failed prune must not abort the caller's transaction
        with self.session.begin_nested():
            result = self.session.execute(
                delete(ContentCompletionRecord)
                .where(ContentCompletionRecord.content_item_id.not_in(live_items))
                .execution_options(synchronize_session="fetch")
            )
        return result.rowcount or 0

    # ========================================
    # Members
    # ========================================

    @store_operation
    def get_member_names(self, member_ids: Sequence[str]) -> dict[str, str]:
        if not member_ids:
            return {}
        stmt = select(Member.id, Member.name).where(Member.id.in_(list(member_ids)))
        return {row.id: row.name for row in self.session.execute(stmt)}
