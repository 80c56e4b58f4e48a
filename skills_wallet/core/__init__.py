"""
Core Module - Skill progress domain model.

Components:
- progress: Progress Reconciliation Engine (compute_view and its value types)
- errors: Typed error kinds surfaced to callers
- logging: Loguru sink configuration

Design Principle:
Every read path (member view, member skill list, admin roster) builds its
numbers through compute_view; nothing else decides precedence.
"""

from skills_wallet.core.errors import (
    ForbiddenError,
    InvalidRequestError,
    LockedError,
    NotAssignedError,
    NotFoundError,
    SkillsWalletError,
    StoreUnavailableError,
)
from skills_wallet.core.progress import (
    ApprovalState,
    AssignmentState,
    AssignmentStatus,
    CatalogItem,
    ItemProgress,
    LedgerEntry,
    ProgressView,
    Resolution,
    compute_view,
    percent_complete,
)

__all__ = [
    # Engine
    "ApprovalState",
    "AssignmentState",
    "AssignmentStatus",
    "CatalogItem",
    "ItemProgress",
    "LedgerEntry",
    "ProgressView",
    "Resolution",
    "compute_view",
    "percent_complete",
    # Errors
    "SkillsWalletError",
    "InvalidRequestError",
    "NotFoundError",
    "ForbiddenError",
    "NotAssignedError",
    "LockedError",
    "StoreUnavailableError",
]
