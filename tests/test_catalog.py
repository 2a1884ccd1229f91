"""
Tests for the technology catalog.
"""

import pytest

from stacksfinder_mcp.core.catalog import Catalog
from stacksfinder_mcp.core.catalog_data import DATA_VERSION
from stacksfinder_mcp.core.errors import CatalogError, ErrorKind, TechNotFoundError
from stacksfinder_mcp.core.models import Category, Dimension


def record(tech_id, category=Category.BACKEND, **extra):
    data = {
        "id": tech_id,
        "name": tech_id.title(),
        "category": category,
        "url": f"https://{tech_id}.example",
        "scores": {d: 70 for d in Dimension},
    }
    data.update(extra)
    return data


class TestCatalogIntegrity:
    """Test load-time checks."""

    def test_bundled_catalog_loads(self, catalog):
        assert len(catalog) > 40
        assert catalog.version == DATA_VERSION

    def test_duplicate_id_is_fatal(self):
        with pytest.raises(CatalogError, match="Duplicate"):
            Catalog.from_records([record("a"), record("a")])

    def test_dangling_compatible_reference_is_fatal(self):
        with pytest.raises(CatalogError, match="ghost"):
            Catalog.from_records([record("a", compatible_with=["ghost"])])

    def test_dangling_conflict_reference_is_fatal(self):
        with pytest.raises(CatalogError, match="ghost"):
            Catalog.from_records([record("a", conflicts_with=["ghost"])])

    def test_out_of_range_score_is_fatal(self):
        bad = record("a")
        bad["scores"] = {Dimension.PERFORMANCE: 101}
        with pytest.raises(CatalogError):
            Catalog.from_records([bad])


class TestCatalogLookup:
    """Test lookups."""

    def test_get_is_exact(self, catalog):
        assert catalog.get("nextjs").name == "Next.js"
        assert catalog.get("NextJS") is None

    def test_require_unknown_suggests(self, catalog):
        with pytest.raises(TechNotFoundError) as excinfo:
            catalog.require("nexjs")
        assert excinfo.value.kind == ErrorKind.TECH_NOT_FOUND
        assert excinfo.value.matches[0] == "nextjs"

    def test_require_unknown_without_close_match(self, catalog):
        with pytest.raises(TechNotFoundError) as excinfo:
            catalog.require("cobol-on-cogs")
        assert excinfo.value.matches == []
        assert excinfo.value.suggestions

    def test_by_category_keeps_registration_order(self):
        catalog = Catalog.from_records([record("b"), record("a"), record("c", Category.ORM)])
        assert [t.id for t in catalog.by_category(Category.BACKEND)] == ["b", "a"]

    def test_grouped_has_every_category(self):
        catalog = Catalog.from_records([record("a")])
        grouped = catalog.grouped_by_category()
        assert set(grouped) == set(Category)
        assert grouped[Category.PAYMENTS] == []

    def test_declarations_are_one_directional(self, catalog):
        assert catalog.declares_compatible("react", "express")
        assert not catalog.declares_compatible("express", "react")
