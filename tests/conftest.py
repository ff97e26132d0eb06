"""Shared fixtures: the bundled sample catalog and a service over it."""

from pathlib import Path

import pytest

from partxref_mcp.part_data import PartCatalog, PartDataService

SAMPLE_CATALOG = Path(__file__).parent.parent / "data" / "catalog.json"


@pytest.fixture
def catalog() -> PartCatalog:
    return PartCatalog.load(SAMPLE_CATALOG)


@pytest.fixture
def service(catalog) -> PartDataService:
    return PartDataService(catalog)
