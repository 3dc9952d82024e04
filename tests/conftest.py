"""Shared test fixtures for the catalog engine tests.

The seeded backend holds a small two-branch generic hierarchy and two
legacy parts:

    m1 Truck ─┬─ c1 Body ────┬─ t1 Door
              │              └─ t2 Roof
              └─ c2 Chassis ──── t3 Frame
    m2 Bus ───── c3 Interior

    cabin  cab1 Cabin A  (types tc1, tc2)
    engine eng1 Diesel   (type te1)
"""

import pytest

from epc_catalog.backends.memory import InMemoryCatalogBackend
from epc_catalog.config import Config, SelectorConfig, VinConfig
from epc_catalog.documents.types import (
    Category,
    MasterCategory,
    PartTypeEntity,
    TypeCategory,
    TypeEntity,
)
from epc_catalog.notifications import Notifier
from epc_catalog.options.mapping import PartKind


# =============================================================================
# Backend Fixtures
# =============================================================================

def seed(backend: InMemoryCatalogBackend) -> InMemoryCatalogBackend:
    backend.add_master_category(MasterCategory("m1", "Truck", "卡车"))
    backend.add_master_category(MasterCategory("m2", "Bus", "客车"))

    backend.add_category(Category("c1", "Body", "车身", master_category_id="m1"))
    backend.add_category(Category("c2", "Chassis", "底盘", master_category_id="m1"))
    backend.add_category(Category("c3", "Interior", "内饰", master_category_id="m2"))

    backend.add_type_category(TypeCategory("t1", "Door", "车门", category_id="c1"))
    backend.add_type_category(TypeCategory("t2", "Roof", "车顶", category_id="c1"))
    backend.add_type_category(TypeCategory("t3", "Frame", "车架", category_id="c2"))

    backend.add_part(PartTypeEntity(
        PartKind.CABIN, "cab1", "Cabin A", "驾驶室A",
        types=(TypeEntity("tc1", "Standard"), TypeEntity("tc2", "Sleeper", "卧铺")),
    ))
    backend.add_part(PartTypeEntity(
        PartKind.ENGINE, "eng1", "Diesel", "柴油",
        types=(TypeEntity("te1", "D12"),),
    ))
    return backend


@pytest.fixture
def backend() -> InMemoryCatalogBackend:
    """In-memory backend with the sample hierarchy."""
    return seed(InMemoryCatalogBackend())


@pytest.fixture
def structured_backend() -> InMemoryCatalogBackend:
    """Like ``backend`` but reporting duplicates with an error code."""
    return seed(InMemoryCatalogBackend(structured_errors=True))


# =============================================================================
# Config Fixtures
# =============================================================================

@pytest.fixture
def config() -> Config:
    """Test configuration with short debounce delays."""
    return Config(
        selectors=SelectorConfig(page_size=10, debounce_seconds=0.01),
        vins=VinConfig(page_size=5, search_debounce_seconds=0.01),
    )


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


# =============================================================================
# CSV Fixtures
# =============================================================================

CSV_HEADER = "target_id,part_number,catalog_item_name_en,catalog_item_name_ch,quantity,description,unit"


@pytest.fixture
def csv_text() -> str:
    return "\n".join([
        CSV_HEADER,
        "p1,PN1,Bolt,螺栓,3,Hex bolt,pcs",
        "p2,PN2,Nut,螺母,10,,pcs",
    ]) + "\n"


@pytest.fixture
def csv_file(tmp_path, csv_text):
    path = tmp_path / "parts.csv"
    path.write_text(csv_text, encoding="utf-8")
    return path
