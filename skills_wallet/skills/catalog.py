"""
Skill catalog editing: skills and their ordered content items.

Catalog edits only change which items exist. Member progress is never
rewritten here; the next computed view simply sees the new catalog.
Deleted items leave orphan ledger records that the caller prunes
afterwards (see AssignmentLifecycleManager.prune_orphan_records).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from loguru import logger

from config import get_settings
from skills_wallet.core.errors import InvalidRequestError, NotFoundError
from skills_wallet.db.models import ContentItem, ContentType, Skill, SkillLevel
from skills_wallet.skills.store import SkillStore


@dataclass
class CatalogItemInput:
    """Content item as submitted by an admin. id is set for existing items."""

    title: str
    content_type: str = ContentType.OTHER.value
    url: str | None = None
    notes: str | None = None
    display_order: int | None = None
    id: str | None = None


@dataclass
class CatalogEditResult:
    """Catalog of a skill after an edit, and the ids that were removed."""

    skill: Skill
    items: list[ContentItem] = field(default_factory=list)
    removed_ids: list[str] = field(default_factory=list)


def parse_level(level: str) -> SkillLevel:
    try:
        return SkillLevel(level.strip().title())
    except (AttributeError, ValueError) as exc:
        allowed = ", ".join(lvl.value for lvl in SkillLevel)
        raise InvalidRequestError(f"Level must be one of: {allowed}") from exc


def _valid_items(items: Sequence[CatalogItemInput]) -> list[CatalogItemInput]:
    """Drop items without a title."""
    return [item for item in items if item.title and item.title.strip()]


class SkillCatalog:
    """Create, list and edit skills and their content items."""

    def __init__(self, store: SkillStore):
        self.store = store
        self.settings = get_settings()

    def create_skill(
        self,
        name: str,
        level: str,
        description: str | None = None,
        items: Sequence[CatalogItemInput] = (),
        icon: str | None = None,
        color: str | None = None,
    ) -> CatalogEditResult:
        """Create an active skill with an optional initial catalog."""
        if not name or not name.strip():
            raise InvalidRequestError("Skill name is required")
        skill_level = parse_level(level)

        skill = self.store.add_skill(
            Skill(
                name=name.strip(),
                description=description,
                level=skill_level.value,
                category=skill_level.value,
                icon=icon or self.settings.default_skill_icon,
                color=color or self.settings.default_skill_color,
                is_active=True,
            )
        )
        created = [
            self.store.add_content_item(self._new_item(skill.id, item, index))
            for index, item in enumerate(_valid_items(items))
        ]
        logger.info(f"Created skill {skill.id} ({skill.name}) with {len(created)} content items")
        return CatalogEditResult(skill=skill, items=created)

    def list_skills(self, active_only: bool = True) -> list[tuple[Skill, int]]:
        """Skills with their content counts."""
        return [
            (skill, self.store.count_content(skill.id))
            for skill in self.store.list_skills(active_only=active_only)
        ]

    def get_skill(self, skill_id: str) -> CatalogEditResult:
        skill = self._require_skill(skill_id)
        return CatalogEditResult(skill=skill, items=self.store.get_catalog(skill_id))

    def update_skill(
        self,
        skill_id: str,
        name: str | None = None,
        description: str | None = None,
        level: str | None = None,
    ) -> Skill:
        """Metadata edit; the catalog is left alone."""
        skill = self._require_skill(skill_id)
        if name is not None:
            if not name.strip():
                raise InvalidRequestError("Skill name cannot be empty")
            skill.name = name.strip()
        if description is not None:
            skill.description = description
        if level is not None:
            skill_level = parse_level(level)
            skill.level = skill_level.value
            skill.category = skill_level.value
        return self.store.add_skill(skill)

    def deactivate_skill(self, skill_id: str) -> Skill:
        """Hide a skill from new assignment. Assignments and progress stay."""
        skill = self._require_skill(skill_id)
        skill.is_active = False
        logger.info(f"Deactivated skill {skill_id}")
        return self.store.add_skill(skill)

    def replace_catalog(self, skill_id: str, items: Sequence[CatalogItemInput]) -> CatalogEditResult:
        """
        Make the skill's catalog exactly the given list.

        Items with a known id are updated in place, items without one are
        inserted, and existing items missing from the list are deleted.
        Items without a title are ignored.
        """
        skill = self._require_skill(skill_id)
        existing = {item.id: item for item in self.store.get_catalog(skill_id)}
        valid = _valid_items(items)
        kept_ids = {item.id for item in valid if item.id in existing}

        removed_ids = [item_id for item_id in existing if item_id not in kept_ids]
        self.store.delete_content_items(removed_ids)

        catalog = []
        for index, item in enumerate(valid):
            current = existing.get(item.id) if item.id else None
            if current is None:
                catalog.append(self.store.add_content_item(self._new_item(skill_id, item, index)))
                continue
            current.title = item.title.strip()
            current.content_type = ContentType.parse(item.content_type).value
            current.url = item.url or None
            current.notes = item.notes or None
            current.display_order = item.display_order if item.display_order is not None else index
            catalog.append(self.store.add_content_item(current))

        catalog.sort(key=lambda content: content.display_order)
        logger.info(
            f"Replaced catalog of skill {skill_id}: {len(catalog)} items, {len(removed_ids)} removed"
        )
        return CatalogEditResult(skill=skill, items=catalog, removed_ids=removed_ids)

    def remove_content_item(self, skill_id: str, item_id: str) -> CatalogEditResult:
        """Delete one item from the skill's catalog."""
        skill = self._require_skill(skill_id)
        if self.store.get_content_item(skill_id, item_id) is None:
            raise NotFoundError(f"Content item {item_id} not found in skill {skill_id}")
        self.store.delete_content_items([item_id])
        logger.info(f"Removed content item {item_id} from skill {skill_id}")
        return CatalogEditResult(
            skill=skill, items=self.store.get_catalog(skill_id), removed_ids=[item_id]
        )

    def _require_skill(self, skill_id: str) -> Skill:
        skill = self.store.get_skill(skill_id)
        if skill is None:
            raise NotFoundError(f"Skill {skill_id} not found")
        return skill

    @staticmethod
    def _new_item(skill_id: str, item: CatalogItemInput, index: int) -> ContentItem:
        return ContentItem(
            skill_id=skill_id,
            title=item.title.strip(),
            content_type=ContentType.parse(item.content_type).value,
            url=item.url or None,
            notes=item.notes or None,
            display_order=item.display_order if item.display_order is not None else index,
        )
