"""
Skill catalog models.

A skill owns an ordered list of content items. Members are assigned
skills; their progress is derived from which of the current items they
marked complete.

Levels (ordered):
- Awareness
- Practice
- Embodiment
- Mastery
- Mentorship
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from skills_wallet.core.progress import CatalogItem

from .base import Base


def new_skill_id() -> str:
    return f"skill-{uuid4().hex[:12]}"


def new_id() -> str:
    return str(uuid4())


class SkillLevel(str, Enum):
    """Fixed ordered set of skill levels."""

    AWARENESS = "Awareness"
    PRACTICE = "Practice"
    EMBODIMENT = "Embodiment"
    MASTERY = "Mastery"
    MENTORSHIP = "Mentorship"


class ContentType(str, Enum):
    """Type tag of a content item."""

    BOOK = "BOOK"
    VIDEO = "VIDEO"
    ARTICLE = "ARTICLE"
    LINK = "LINK"
    DOCUMENT = "DOCUMENT"
    COURSE = "COURSE"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str | None) -> ContentType:
        """Parse a loosely-cased type tag, falling back to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.OTHER


class Skill(Base):
    """
    A learnable skill.

    Attributes:
        level: One of SkillLevel values
        is_active: Inactive skills cannot be newly assigned and are hidden
                   from member skill lists; history is kept
    """

    __tablename__ = "skills"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_skill_id)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    level: Mapped[str] = mapped_column(String(32), nullable=False)
    category: Mapped[str | None] = mapped_column(Text)
    icon: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str | None] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    # Relationships
    content_items: Mapped[list[ContentItem]] = relationship(
        back_populates="skill",
        order_by="ContentItem.display_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Skill({self.id}, {self.name!r}, {self.level})>"


class ContentItem(Base):
    """One unit of learning material belonging to exactly one skill."""

    __tablename__ = "skill_content"
    __table_args__ = (Index("ix_skill_content_skill_order", "skill_id", "display_order"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_id)
    skill_id: Mapped[str] = mapped_column(
        ForeignKey("skills.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content_type: Mapped[str] = mapped_column("type", String(32), default=ContentType.OTHER.value)
    url: Mapped[str | None] = mapped_column(Text)
    notes: Mapped[str | None] = mapped_column(Text)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    skill: Mapped[Skill] = relationship(back_populates="content_items")

    def __repr__(self) -> str:
        return f"<ContentItem({self.id}, skill:{self.skill_id}, #{self.display_order})>"

    def to_catalog_item(self) -> CatalogItem:
        return CatalogItem(
            id=self.id,
            title=self.title,
            content_type=self.content_type,
            url=self.url,
            notes=self.notes,
            display_order=self.display_order,
        )
