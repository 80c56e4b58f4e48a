"""FastAPI dependencies wiring services to the per-request session."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from skills_wallet.db.database import get_session
from skills_wallet.skills.catalog import SkillCatalog
from skills_wallet.skills.lifecycle import AssignmentLifecycleManager
from skills_wallet.skills.service import SkillProgressService
from skills_wallet.skills.store import SqlAlchemySkillStore


def get_store(session: Session = Depends(get_session)) -> SqlAlchemySkillStore:
    return SqlAlchemySkillStore(session)


def get_progress_service(store: SqlAlchemySkillStore = Depends(get_store)) -> SkillProgressService:
    return SkillProgressService(store)


def get_lifecycle(store: SqlAlchemySkillStore = Depends(get_store)) -> AssignmentLifecycleManager:
    return AssignmentLifecycleManager(store)


def get_catalog(store: SqlAlchemySkillStore = Depends(get_store)) -> SkillCatalog:
    return SkillCatalog(store)
