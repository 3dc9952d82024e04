"""Field mappings between service records and options.

Every option kind the service can list is described by one
``OptionFieldMapping``. The five legacy part kinds (cabin, engine, axle,
transmission, steering) additionally carry a ``PartKindMapping`` naming the
nested array that holds their sub-types. These tables replace per-kind code:
selectors, sources and the HTTP backend all look fields up here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .types import Option


class OptionKind(str, Enum):
    """Lists that can feed a selector."""
    MASTER_CATEGORY = "master_category"
    CATEGORY = "category"
    TYPE_CATEGORY = "type_category"
    CABIN = "cabin"
    ENGINE = "engine"
    AXLE = "axle"
    TRANSMISSION = "transmission"
    STEERING = "steering"
    CATALOG_DOCUMENT = "catalog_document"


class PartKind(str, Enum):
    """The legacy part families."""
    CABIN = "cabin"
    ENGINE = "engine"
    AXLE = "axle"
    TRANSMISSION = "transmission"
    STEERING = "steering"

    @property
    def option_kind(self) -> OptionKind:
        return OptionKind(self.value)


def format_label(name_en: Any, name_cn: Any = None) -> str:
    """Render ``"English - Chinese"``, or just the English name."""
    name_en = str(name_en or "").strip()
    name_cn = str(name_cn or "").strip()
    if name_en and name_cn:
        return f"{name_en} - {name_cn}"
    return name_en or name_cn


@dataclass(frozen=True, slots=True)
class OptionFieldMapping:
    """How to read one kind of record."""
    resource: str                       # URL segment under /catalogs/
    id_field: str
    name_en_field: str
    name_cn_field: str | None = None
    parent_filter: str | None = None    # request field carrying the parent id

    def to_option(self, record: dict[str, Any], kind: str | None = None) -> Option:
        name_cn = record.get(self.name_cn_field) if self.name_cn_field else None
        return Option(
            id=str(record.get(self.id_field, "")),
            label=format_label(record.get(self.name_en_field), name_cn),
            kind=kind,
            data=dict(record),
        )


@dataclass(frozen=True, slots=True)
class PartKindMapping:
    """A part family: its own fields plus the nested sub-type array."""
    kind: PartKind
    display_name: str
    fields: OptionFieldMapping
    types_field: str
    type_fields: OptionFieldMapping

    def type_options(self, record: dict[str, Any]) -> list[Option]:
        """Sub-type options nested inside a part record."""
        nested = record.get(self.types_field) or []
        return [
            self.type_fields.to_option(t, kind=f"{self.kind.value}_type")
            for t in nested
            if isinstance(t, dict)
        ]


OPTION_FIELDS: dict[OptionKind, OptionFieldMapping] = {
    OptionKind.MASTER_CATEGORY: OptionFieldMapping(
        resource="master-category",
        id_field="master_category_id",
        name_en_field="master_category_name_en",
        name_cn_field="master_category_name_cn",
    ),
    OptionKind.CATEGORY: OptionFieldMapping(
        resource="category",
        id_field="category_id",
        name_en_field="category_name_en",
        name_cn_field="category_name_cn",
        parent_filter="master_category_id",
    ),
    OptionKind.TYPE_CATEGORY: OptionFieldMapping(
        resource="type-category",
        id_field="type_category_id",
        name_en_field="type_category_name_en",
        name_cn_field="type_category_name_cn",
        parent_filter="category_id",
    ),
    OptionKind.CABIN: OptionFieldMapping(
        resource="cabines",
        id_field="cabines_id",
        name_en_field="cabines_name_en",
        name_cn_field="cabines_name_cn",
    ),
    OptionKind.ENGINE: OptionFieldMapping(
        resource="engines",
        id_field="engines_id",
        name_en_field="engines_name_en",
        name_cn_field="engines_name_cn",
    ),
    OptionKind.AXLE: OptionFieldMapping(
        resource="axel",
        id_field="axel_id",
        name_en_field="axel_name_en",
        name_cn_field="axel_name_cn",
    ),
    OptionKind.TRANSMISSION: OptionFieldMapping(
        resource="transmission",
        id_field="transmission_id",
        name_en_field="transmission_name_en",
        name_cn_field="transmission_name_cn",
    ),
    OptionKind.STEERING: OptionFieldMapping(
        resource="steering",
        id_field="steering_id",
        name_en_field="steering_name_en",
        name_cn_field="steering_name_cn",
    ),
    OptionKind.CATALOG_DOCUMENT: OptionFieldMapping(
        resource="all-item-catalogs",
        id_field="master_pdf_id",
        name_en_field="name_pdf",
        name_cn_field="master_catalog",
    ),
}


def _type_fields(prefix: str) -> OptionFieldMapping:
    return OptionFieldMapping(
        resource="",
        id_field=f"{prefix}_id",
        name_en_field=f"{prefix}_name_en",
        name_cn_field=f"{prefix}_name_cn",
    )


PART_KINDS: dict[PartKind, PartKindMapping] = {
    PartKind.CABIN: PartKindMapping(
        kind=PartKind.CABIN,
        display_name="Cabin",
        fields=OPTION_FIELDS[OptionKind.CABIN],
        types_field="type_cabines",
        type_fields=_type_fields("type_cabine"),
    ),
    PartKind.ENGINE: PartKindMapping(
        kind=PartKind.ENGINE,
        display_name="Engine",
        fields=OPTION_FIELDS[OptionKind.ENGINE],
        types_field="type_engines",
        type_fields=_type_fields("type_engine"),
    ),
    PartKind.AXLE: PartKindMapping(
        kind=PartKind.AXLE,
        display_name="Axle",
        fields=OPTION_FIELDS[OptionKind.AXLE],
        types_field="type_axels",
        type_fields=_type_fields("type_axel"),
    ),
    PartKind.TRANSMISSION: PartKindMapping(
        kind=PartKind.TRANSMISSION,
        display_name="Transmission",
        fields=OPTION_FIELDS[OptionKind.TRANSMISSION],
        types_field="type_transmissions",
        type_fields=_type_fields("type_transmission"),
    ),
    PartKind.STEERING: PartKindMapping(
        kind=PartKind.STEERING,
        display_name="Steering",
        fields=OPTION_FIELDS[OptionKind.STEERING],
        types_field="type_steerings",
        type_fields=_type_fields("type_steering"),
    ),
}


def part_type_options() -> list[Option]:
    """Static options for the part-type discriminator."""
    return [
        Option(id=m.kind.value, label=m.display_name, kind="part_type")
        for m in PART_KINDS.values()
    ]
