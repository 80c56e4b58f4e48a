"""
Admin router for skills, catalogs and member assignments.

Endpoints for:
- Skill CRUD (create, list, metadata edit, deactivate, hard delete)
- Catalog edits (replace content items, remove one item)
- Assigning skills to members and removing assignments
- Admin decisions (approve, reject, complete, comment, clear, reopen)
- Roster of all assignments with computed progress
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger

from config import get_settings
from skills_wallet.api.dependencies import get_catalog, get_lifecycle, get_progress_service
from skills_wallet.api.schemas import (
    AssignmentResponse,
    AssignSkillsRequest,
    AssignSkillsResponse,
    CascadeResponse,
    CatalogReplaceRequest,
    ContentItemResponse,
    DecisionRequest,
    RosterEntryResponse,
    RosterResponse,
    SkillCatalogResponse,
    SkillCreateRequest,
    SkillResponse,
    SkillUpdateRequest,
)
from skills_wallet.skills.catalog import CatalogEditResult, SkillCatalog
from skills_wallet.skills.lifecycle import AssignmentLifecycleManager, DecisionAction
from skills_wallet.skills.service import SkillProgressService

router = APIRouter()


def _catalog_response(result: CatalogEditResult, pruned: int = 0) -> SkillCatalogResponse:
    return SkillCatalogResponse(
        skill=SkillResponse.from_skill(result.skill, content_count=len(result.items)),
        content_items=[ContentItemResponse.from_item(item) for item in result.items],
        removed_item_ids=result.removed_ids,
        pruned_records=pruned,
    )


def _prune_after_edit(result: CatalogEditResult, lifecycle: AssignmentLifecycleManager) -> int:
    if not result.removed_ids or not get_settings().prune_orphans_on_catalog_edit:
        return 0
    return lifecycle.prune_orphan_records()


# ========================================
# Skills and catalog
# ========================================


@router.get("/skills", response_model=list[SkillResponse], summary="List skills")
def list_skills(
    include_inactive: bool = Query(False, alias="includeInactive"),
    catalog: SkillCatalog = Depends(get_catalog),
) -> list[SkillResponse]:
    """Skills with their content counts, newest first."""
    return [
        SkillResponse.from_skill(skill, content_count=count)
        for skill, count in catalog.list_skills(active_only=not include_inactive)
    ]


@router.post(
    "/skills",
    response_model=SkillCatalogResponse,
    status_code=201,
    summary="Create skill",
)
def create_skill(
    request: SkillCreateRequest,
    catalog: SkillCatalog = Depends(get_catalog),
) -> SkillCatalogResponse:
    """Create a skill with an optional initial list of content items."""
    result = catalog.create_skill(
        name=request.name,
        level=request.level,
        description=request.description,
        items=[item.to_input() for item in request.content_items],
        icon=request.icon,
        color=request.color,
    )
    return _catalog_response(result)


@router.get("/skills/{skill_id}", response_model=SkillCatalogResponse, summary="Get skill")
def get_skill(
    skill_id: str,
    catalog: SkillCatalog = Depends(get_catalog),
) -> SkillCatalogResponse:
    return _catalog_response(catalog.get_skill(skill_id))


@router.patch("/skills/{skill_id}", response_model=SkillResponse, summary="Edit skill metadata")
def update_skill(
    skill_id: str,
    request: SkillUpdateRequest,
    catalog: SkillCatalog = Depends(get_catalog),
) -> SkillResponse:
    skill = catalog.update_skill(
        skill_id, name=request.name, description=request.description, level=request.level
    )
    return SkillResponse.from_skill(skill)


@router.put(
    "/skills/{skill_id}/content",
    response_model=SkillCatalogResponse,
    summary="Replace skill catalog",
)
def replace_catalog(
    skill_id: str,
    request: CatalogReplaceRequest,
    catalog: SkillCatalog = Depends(get_catalog),
    lifecycle: AssignmentLifecycleManager = Depends(get_lifecycle),
) -> SkillCatalogResponse:
    """
    Make the catalog exactly the submitted list (add, update, reorder, remove).

    Removed items drop out of every member's progress denominator on the
    next read; their ledger records are pruned best-effort.
    """
    result = catalog.replace_catalog(skill_id, [item.to_input() for item in request.content_items])
    return _catalog_response(result, pruned=_prune_after_edit(result, lifecycle))


@router.delete(
    "/skills/{skill_id}/content/{item_id}",
    response_model=SkillCatalogResponse,
    summary="Remove content item",
)
def remove_content_item(
    skill_id: str,
    item_id: str,
    catalog: SkillCatalog = Depends(get_catalog),
    lifecycle: AssignmentLifecycleManager = Depends(get_lifecycle),
) -> SkillCatalogResponse:
    result = catalog.remove_content_item(skill_id, item_id)
    return _catalog_response(result, pruned=_prune_after_edit(result, lifecycle))


@router.post(
    "/skills/{skill_id}/deactivate",
    response_model=SkillResponse,
    summary="Deactivate skill",
)
def deactivate_skill(
    skill_id: str,
    catalog: SkillCatalog = Depends(get_catalog),
) -> SkillResponse:
    """Hide the skill from new assignments; existing progress is kept."""
    return SkillResponse.from_skill(catalog.deactivate_skill(skill_id))


@router.delete("/skills/{skill_id}", response_model=CascadeResponse, summary="Delete skill")
def delete_skill(
    skill_id: str,
    lifecycle: AssignmentLifecycleManager = Depends(get_lifecycle),
) -> CascadeResponse:
    """Hard delete: ledger records, content items, assignments, then the skill."""
    return CascadeResponse.from_result(lifecycle.delete_skill(skill_id))


# ========================================
# Assignments
# ========================================


@router.get("/assignments", response_model=RosterResponse, summary="Assignment roster")
def get_roster(
    member_id: Optional[str] = Query(None, alias="memberId"),
    service: SkillProgressService = Depends(get_progress_service),
) -> RosterResponse:
    """Every assignment grouped by member, with computed progress."""
    return RosterResponse(
        member_skills=[RosterEntryResponse.from_roster(roster) for roster in service.roster(member_id)]
    )


@router.post("/assignments", response_model=AssignSkillsResponse, summary="Assign skills")
def assign_skills(
    request: AssignSkillsRequest,
    lifecycle: AssignmentLifecycleManager = Depends(get_lifecycle),
) -> AssignSkillsResponse:
    """Assign skills to a member. Already-assigned skills are left unchanged."""
    return AssignSkillsResponse.from_result(lifecycle.assign_skills(request.member_id, request.skill_ids))


@router.delete(
    "/assignments/{member_id}/{skill_id}",
    response_model=CascadeResponse,
    summary="Remove assignment",
)
def remove_assignment(
    member_id: str,
    skill_id: str,
    lifecycle: AssignmentLifecycleManager = Depends(get_lifecycle),
) -> CascadeResponse:
    """Remove the assignment and the member's ledger records for the skill."""
    return CascadeResponse.from_result(lifecycle.remove_assignment(member_id, skill_id))


@router.post(
    "/assignments/{member_id}/{skill_id}/{action}",
    response_model=AssignmentResponse,
    summary="Apply admin decision",
)
def admin_decision(
    member_id: str,
    skill_id: str,
    action: DecisionAction,
    request: Optional[DecisionRequest] = None,
    lifecycle: AssignmentLifecycleManager = Depends(get_lifecycle),
) -> AssignmentResponse:
    """
    Apply one decision: approve, reject, complete, comment, clear or reopen.

    Decisions never change the member's completion ledger. Rejection wins
    over completion in every computed view until it is cleared.
    """
    note = request.note if request else None
    assignment = lifecycle.admin_decision(member_id, skill_id, action, note=note)
    logger.debug(f"Decision {action.value} applied: {assignment!r}")
    return AssignmentResponse.from_assignment(assignment)
