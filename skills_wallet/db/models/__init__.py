# SQLAlchemy models
from .base import Base
from .members import ContentCompletionRecord, Member, MemberSkillAssignment
from .skills import ContentItem, ContentType, Skill, SkillLevel

__all__ = [
    # Base
    "Base",
    # Catalog
    "Skill",
    "SkillLevel",
    "ContentItem",
    "ContentType",
    # Members
    "Member",
    "MemberSkillAssignment",
    "ContentCompletionRecord",
]
