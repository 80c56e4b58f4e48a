"""
Member assignment and completion ledger models.

- MemberSkillAssignment: admin decision record per (member, skill)
- ContentCompletionRecord: member's own completion flag per (member, item)

The ledger has no foreign key to skill_content. Removing a catalog item
leaves its ledger rows orphaned until pruned; the progress engine ignores
them because it only walks the current catalog.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skills_wallet.core.progress import AssignmentState, AssignmentStatus, LedgerEntry

from .base import Base
from .skills import Skill, new_id


class Member(Base):
    """Minimal member profile, used to label the admin roster."""

    __tablename__ = "members"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, unique=True)

    created_at: Mapped[datetime] = mapped_column(default=func.now())

    def __repr__(self) -> str:
        return f"<Member({self.id}, {self.name!r})>"


class MemberSkillAssignment(Base):
    """
    Assignment of one skill to one member, plus the admin decision.

    Attributes:
        admin_approved: True (approved), False (rejected), None (no decision)
        status: NOT_STARTED / IN_PROGRESS / COMPLETED. Only COMPLETED is
                authoritative; other values are hints the engine recomputes.
        admin_notes: Free-text admin comment
    """

    __tablename__ = "member_skills"
    __table_args__ = (UniqueConstraint("member_id", "skill_id", name="uq_member_skill"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    member_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    skill_id: Mapped[str] = mapped_column(
        ForeignKey("skills.id", ondelete="CASCADE"), nullable=False, index=True
    )
    admin_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), default=AssignmentStatus.NOT_STARTED.value, nullable=False
    )
    admin_notes: Mapped[str | None] = mapped_column(Text)
    assigned_date: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    skill: Mapped[Skill] = relationship()

    def __repr__(self) -> str:
        return (
            f"<MemberSkillAssignment(member:{self.member_id}, skill:{self.skill_id}, "
            f"approved={self.admin_approved}, {self.status})>"
        )

    def to_state(self) -> AssignmentState:
        return AssignmentState.from_record(self.admin_approved, self.status, self.admin_notes)


class ContentCompletionRecord(Base):
    """A member's completion flag for one content item."""

    __tablename__ = "user_skill_content_progress"
    __table_args__ = (
        UniqueConstraint("member_id", "content_item_id", name="uq_member_content"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    member_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    content_item_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<ContentCompletionRecord(member:{self.member_id}, item:{self.content_item_id}, {self.is_completed})>"

    def to_ledger_entry(self) -> LedgerEntry:
        return LedgerEntry(
            content_item_id=self.content_item_id,
            is_completed=self.is_completed,
            completed_at=self.completed_at,
        )
