"""
Member router: a member's own skills and progress.

Endpoints for:
- Listing assigned skills with computed progress
- Detailed view of one skill with per-item completion
- Toggling completion of a content item

Callers are assumed authenticated; memberId identifies whose view to build.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from skills_wallet.api.dependencies import get_progress_service
from skills_wallet.api.schemas import (
    MemberSkillsResponse,
    SkillSummaryResponse,
    SkillViewResponse,
    ToggleRequest,
    ToggleResponse,
)
from skills_wallet.skills.service import SkillProgressService

router = APIRouter()


@router.get(
    "/skills",
    response_model=MemberSkillsResponse,
    summary="List assigned skills",
)
def list_member_skills(
    member_id: str = Query(..., alias="memberId"),
    service: SkillProgressService = Depends(get_progress_service),
) -> MemberSkillsResponse:
    """
    All active skills assigned to the member.

    Rejected skills are listed with 0% progress; admin-completed skills
    report 100%.
    """
    details = service.list_member_skills(member_id)
    return MemberSkillsResponse(
        member_id=member_id,
        skills=[SkillSummaryResponse.from_detail(detail) for detail in details],
    )


@router.get(
    "/skills/{skill_id}",
    response_model=SkillViewResponse,
    summary="Get skill progress view",
)
def get_skill_view(
    skill_id: str,
    member_id: str = Query(..., alias="memberId"),
    service: SkillProgressService = Depends(get_progress_service),
) -> SkillViewResponse:
    """Skill metadata, admin decision and per-item completion for one member."""
    return SkillViewResponse.from_detail(service.get_skill_view(member_id, skill_id))


@router.post(
    "/skills/{skill_id}/content/{item_id}/toggle",
    response_model=ToggleResponse,
    summary="Toggle content item completion",
)
def toggle_completion(
    skill_id: str,
    item_id: str,
    request: ToggleRequest,
    service: SkillProgressService = Depends(get_progress_service),
) -> ToggleResponse:
    """
    Flip the member's completion flag for one content item.

    Returns 423 Locked when an admin marked the skill complete.
    """
    result = service.toggle_completion(request.member_id, skill_id, item_id)
    return ToggleResponse.from_result(result)
