"""Read-only technology registry.

Loaded once at process start. Integrity problems (duplicate ids, references
to unknown ids) are fatal at load time rather than surfacing per request.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from .catalog_data import DATA_VERSION, TECHNOLOGY_RECORDS
from .errors import CatalogError, TechNotFoundError
from .models import Category, Technology

logger = logging.getLogger(__name__)


class Catalog:
    """Immutable registry of technologies keyed by case-sensitive id."""

    def __init__(self, technologies: Iterable[Technology], version: str = DATA_VERSION):
        self.version = version
        self._by_id: dict[str, Technology] = {}
        for tech in technologies:
            if tech.id in self._by_id:
                raise CatalogError(f"Duplicate technology id in catalog: {tech.id}")
            self._by_id[tech.id] = tech

        known = set(self._by_id)
        for tech in self._by_id.values():
            dangling = sorted((tech.compatible_with | tech.conflicts_with) - known)
            if dangling:
                raise CatalogError(f"{tech.id} references unknown technologies: {', '.join(dangling)}")

    @classmethod
    def from_records(cls, records: Iterable[dict], version: str = DATA_VERSION) -> "Catalog":
        try:
            technologies = [Technology.model_validate(r) for r in records]
        except ValidationError as exc:
            raise CatalogError(f"Invalid technology record: {exc}") from exc
        return cls(technologies, version)

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, tech_id: object) -> bool:
        return tech_id in self._by_id

    def get(self, tech_id: str) -> Optional[Technology]:
        return self._by_id.get(tech_id)

    def require(self, tech_id: str) -> Technology:
        """Exact lookup; raises TechNotFoundError with suggestions on a miss."""
        tech = self._by_id.get(tech_id)
        if tech is None:
            raise TechNotFoundError(tech_id, self._by_id.keys())
        return tech

    def ids(self) -> list[str]:
        return list(self._by_id)

    def all(self) -> list[Technology]:
        return list(self._by_id.values())

    def by_category(self, category: Category) -> list[Technology]:
        """Technologies in one category, in registration order."""
        return [t for t in self._by_id.values() if t.category == category]

    def grouped_by_category(self) -> dict[Category, list[Technology]]:
        grouped: dict[Category, list[Technology]] = {c: [] for c in Category}
        for tech in self._by_id.values():
            grouped[tech.category].append(tech)
        return grouped

    def declares_compatible(self, source: str, target: str) -> bool:
        tech = self._by_id.get(source)
        return tech is not None and target in tech.compatible_with

    def declares_conflict(self, source: str, target: str) -> bool:
        tech = self._by_id.get(source)
        return tech is not None and target in tech.conflicts_with


def load_catalog() -> Catalog:
    """Build the bundled catalog."""
    catalog = Catalog.from_records(TECHNOLOGY_RECORDS)
    logger.debug("Loaded technology catalog %s (%d technologies)", catalog.version, len(catalog))
    return catalog
