"""
Skills services.

- store: SkillStore query interface and its SQLAlchemy implementation
- service: member views, admin roster and the completion toggle
- lifecycle: assignment creation/removal, admin decisions, cascades
- catalog: skill and content item editing
"""

from skills_wallet.skills.catalog import CatalogEditResult, CatalogItemInput, SkillCatalog
from skills_wallet.skills.lifecycle import (
    AssignmentBatchResult,
    AssignmentLifecycleManager,
    CascadeResult,
    DecisionAction,
)
from skills_wallet.skills.service import (
    MemberRoster,
    SkillDetail,
    SkillProgressService,
    ToggleResult,
)
from skills_wallet.skills.store import SkillStore, SqlAlchemySkillStore

__all__ = [
    "SkillStore",
    "SqlAlchemySkillStore",
    "SkillProgressService",
    "SkillDetail",
    "ToggleResult",
    "MemberRoster",
    "AssignmentLifecycleManager",
    "AssignmentBatchResult",
    "CascadeResult",
    "DecisionAction",
    "SkillCatalog",
    "CatalogItemInput",
    "CatalogEditResult",
]
