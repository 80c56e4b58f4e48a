"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Database fixtures run against an in-memory SQLite database, so no server
is needed.
"""
import sys
from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from skills_wallet.db.database import build_engine, init_db  # noqa: E402
from skills_wallet.db.models import Member, Skill  # noqa: E402
from skills_wallet.skills.catalog import CatalogItemInput, SkillCatalog  # noqa: E402
from skills_wallet.skills.lifecycle import AssignmentLifecycleManager  # noqa: E402
from skills_wallet.skills.service import SkillProgressService  # noqa: E402
from skills_wallet.skills.store import SqlAlchemySkillStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API over SQLite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session: Session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def store(db_session):
    return SqlAlchemySkillStore(db_session)


@pytest.fixture
def progress_service(store):
    return SkillProgressService(store)


@pytest.fixture
def lifecycle(store):
    return AssignmentLifecycleManager(store)


@pytest.fixture
def catalog(store):
    return SkillCatalog(store)


@pytest.fixture
def make_skill(catalog) -> Callable[..., Skill]:
    """Create a skill with ``item_count`` content items titled 'Item 1'..."""

    def _make(name: str = "Deep Listening", level: str = "Awareness", item_count: int = 4) -> Skill:
        items = [
            CatalogItemInput(title=f"Item {n}", content_type="ARTICLE", display_order=n)
            for n in range(1, item_count + 1)
        ]
        return catalog.create_skill(name=name, level=level, items=items).skill

    return _make


@pytest.fixture
def member(db_session) -> Member:
    member = Member(id="member-1", name="Ada Member", email="ada@example.org")
    db_session.add(member)
    db_session.flush()
    return member
