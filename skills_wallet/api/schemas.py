"""
Request/response models for the skills API.

JSON uses camelCase (isCompleted, completedCount, ...) while Python code
keeps snake_case; every model accepts both on input.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skills_wallet.core.progress import ItemProgress, ProgressView
from skills_wallet.db.models import ContentItem, MemberSkillAssignment, Skill
from skills_wallet.skills.catalog import CatalogItemInput
from skills_wallet.skills.lifecycle import AssignmentBatchResult, CascadeResult
from skills_wallet.skills.service import MemberRoster, SkillDetail, ToggleResult


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========================================
# Catalog
# ========================================


class ContentItemRequest(ApiModel):
    """Content item submitted by an admin."""

    id: Optional[str] = Field(None, description="Existing item id (omit for new items)")
    title: str = Field(..., description="Item title; items with a blank title are ignored")
    content_type: str = Field("OTHER", alias="type", description="BOOK, VIDEO, ARTICLE, LINK, ...")
    url: Optional[str] = None
    notes: Optional[str] = None
    display_order: Optional[int] = Field(
        None, validation_alias=AliasChoices("displayOrder", "display_order", "order")
    )

    def to_input(self) -> CatalogItemInput:
        return CatalogItemInput(
            id=self.id,
            title=self.title,
            content_type=self.content_type,
            url=self.url,
            notes=self.notes,
            display_order=self.display_order,
        )


class SkillCreateRequest(ApiModel):
    name: str
    level: str = Field(..., description="Awareness, Practice, Embodiment, Mastery or Mentorship")
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    content_items: list[ContentItemRequest] = Field(default_factory=list)


class SkillUpdateRequest(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    level: Optional[str] = None


class CatalogReplaceRequest(ApiModel):
    content_items: list[ContentItemRequest] = Field(default_factory=list)


class ContentItemResponse(ApiModel):
    id: str
    title: str
    content_type: str = Field(..., alias="type")
    url: Optional[str] = None
    notes: Optional[str] = None
    display_order: int = 0
    is_completed: Optional[bool] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: ContentItem) -> ContentItemResponse:
        return cls(
            id=item.id,
            title=item.title,
            content_type=item.content_type,
            url=item.url,
            notes=item.notes,
            display_order=item.display_order,
        )

    @classmethod
    def from_progress(cls, entry: ItemProgress) -> ContentItemResponse:
        return cls(
            id=entry.item.id,
            title=entry.item.title,
            content_type=entry.item.content_type,
            url=entry.item.url,
            notes=entry.item.notes,
            display_order=entry.item.display_order,
            is_completed=entry.is_completed,
            completed_at=entry.completed_at,
        )


class SkillResponse(ApiModel):
    id: str
    name: str
    description: Optional[str] = None
    level: str
    category: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: bool = True
    content_count: Optional[int] = None

    @classmethod
    def from_skill(cls, skill: Skill, content_count: int | None = None) -> SkillResponse:
        return cls(
            id=skill.id,
            name=skill.name,
            description=skill.description,
            level=skill.level,
            category=skill.category,
            icon=skill.icon,
            color=skill.color,
            is_active=skill.is_active,
            content_count=content_count,
        )


class SkillCatalogResponse(ApiModel):
    skill: SkillResponse
    content_items: list[ContentItemResponse]
    removed_item_ids: list[str] = Field(default_factory=list)
    pruned_records: int = 0


# ========================================
# Progress views
# ========================================


class ProgressFields(ApiModel):
    status: str
    progress: int = Field(..., ge=0, le=100)
    completed_count: int
    total_count: int
    resolution: str
    locked: bool

    @staticmethod
    def view_fields(view: ProgressView) -> dict[str, object]:
        return {
            "status": view.status.value,
            "progress": view.progress,
            "completed_count": view.completed_count,
            "total_count": view.total_count,
            "resolution": view.resolution.value,
            "locked": view.locked,
        }


class SkillSummaryResponse(ProgressFields):
    """One assigned skill with its computed progress."""

    skill: SkillResponse
    member_id: str
    admin_approved: Optional[bool] = None
    admin_notes: Optional[str] = None
    assignment_status: str
    assigned_date: Optional[datetime] = None
    is_completed: bool

    @classmethod
    def from_detail(cls, detail: SkillDetail) -> SkillSummaryResponse:
        return cls(
            skill=SkillResponse.from_skill(detail.skill),
            member_id=detail.member_id,
            admin_approved=detail.assignment.approval.to_flag(),
            admin_notes=detail.assignment.admin_notes,
            assignment_status=detail.assignment.status.value,
            assigned_date=detail.assigned_date,
            is_completed=detail.view.is_completed,
            **cls.view_fields(detail.view),
        )


class SkillViewResponse(SkillSummaryResponse):
    """Detailed member view with per-item completion."""

    content_items: list[ContentItemResponse]

    @classmethod
    def from_detail(cls, detail: SkillDetail) -> SkillViewResponse:
        summary = SkillSummaryResponse.from_detail(detail)
        return cls(
            **summary.model_dump(),
            content_items=[ContentItemResponse.from_progress(entry) for entry in detail.view.items],
        )


class MemberSkillsResponse(ApiModel):
    member_id: str
    skills: list[SkillSummaryResponse]


class ToggleRequest(ApiModel):
    member_id: str


class ToggleResponse(ProgressFields):
    success: bool = True
    content_item_id: str
    is_completed: bool

    @classmethod
    def from_result(cls, result: ToggleResult) -> ToggleResponse:
        return cls(
            content_item_id=result.content_item_id,
            is_completed=result.is_completed,
            **cls.view_fields(result.view),
        )


# ========================================
# Assignments
# ========================================


class AssignSkillsRequest(ApiModel):
    member_id: str
    skill_ids: list[str] = Field(..., min_length=1)


class AssignSkillsResponse(ApiModel):
    success: bool = True
    member_id: str
    created: list[str]
    existing: list[str]

    @classmethod
    def from_result(cls, result: AssignmentBatchResult) -> AssignSkillsResponse:
        return cls(member_id=result.member_id, created=result.created, existing=result.existing)


class DecisionRequest(ApiModel):
    note: Optional[str] = Field(None, validation_alias=AliasChoices("note", "comment"))


class AssignmentResponse(ApiModel):
    member_id: str
    skill_id: str
    admin_approved: Optional[bool] = None
    status: str
    admin_notes: Optional[str] = None
    assigned_date: Optional[datetime] = None

    @classmethod
    def from_assignment(cls, assignment: MemberSkillAssignment) -> AssignmentResponse:
        return cls(
            member_id=assignment.member_id,
            skill_id=assignment.skill_id,
            admin_approved=assignment.admin_approved,
            status=assignment.status,
            admin_notes=assignment.admin_notes,
            assigned_date=assignment.assigned_date,
        )


class RosterEntryResponse(ApiModel):
    member_id: str
    member_name: str
    skills: list[SkillSummaryResponse]

    @classmethod
    def from_roster(cls, roster: MemberRoster) -> RosterEntryResponse:
        return cls(
            member_id=roster.member_id,
            member_name=roster.member_name,
            skills=[SkillSummaryResponse.from_detail(detail) for detail in roster.skills],
        )


class RosterResponse(ApiModel):
    member_skills: list[RosterEntryResponse]


class CascadeResponse(ApiModel):
    success: bool = True
    deleted: dict[str, int]

    @classmethod
    def from_result(cls, result: CascadeResult) -> CascadeResponse:
        return cls(deleted=result.to_dict())
