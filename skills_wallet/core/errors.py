"""
Typed error kinds raised by the skills services.

Each kind carries the HTTP status the API surfaces it with, so routers
never translate errors by hand.
"""

from __future__ import annotations


class SkillsWalletError(Exception):
    """Base class for all expected service failures."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "detail": self.message}


class InvalidRequestError(SkillsWalletError):
    """Request is malformed (empty note, unknown level, ...)."""

    kind = "invalid_request"
    status_code = 400


class NotFoundError(SkillsWalletError):
    """Skill, content item or assignment does not exist."""

    kind = "not_found"
    status_code = 404


class ForbiddenError(SkillsWalletError):
    """Operation is not allowed for this member or skill."""

    kind = "forbidden"
    status_code = 403


class NotAssignedError(ForbiddenError):
    """Member has no assignment for the skill."""

    kind = "not_assigned"

    def __init__(self, member_id: str, skill_id: str):
        super().__init__(f"Skill {skill_id} is not assigned to member {member_id}")
        self.member_id = member_id
        self.skill_id = skill_id


class LockedError(SkillsWalletError):
    """Assignment was marked complete by an admin and refuses member edits."""

    kind = "locked"
    status_code = 423

    def __init__(self, member_id: str, skill_id: str):
        super().__init__("Skill marked as complete by admin")
        self.member_id = member_id
        self.skill_id = skill_id


class StoreUnavailableError(SkillsWalletError):
    """Record store failed or could not be reached."""

    kind = "store_unavailable"
    status_code = 503
