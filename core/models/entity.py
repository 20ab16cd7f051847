"""
entity.py

Generic record for every entity shown in a list screen.

The console does not model each entity's full field set; it keeps the raw
payload in ``data`` and extracts only what the action model needs: identity,
normalized status, subtype, due date and the server-computed ``can*`` flags.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from core.helpers.date_time_helper import parse_wire_datetime
from lifecycle.enum.statuses import (
    AcquisitionStatus,
    AcquisitionType,
    ActivityStatus,
    MaterialType,
    OrderStatus,
    ProductionPlanStatus,
    WireEnum,
)

logger = logging.getLogger(__name__)


class EntityType(str, Enum):
    ACQUISITION = "acquisition"
    MATERIAL = "material"
    PRODUCTION_PLAN = "production_plan"
    RECYCLABLE_PRODUCTION_PLAN = "recyclable_production_plan"
    ORDER = "order"
    CLIENT = "client"
    SUPPLIER = "supplier"
    TRANSPORT = "transport"
    USER = "user"


_STATUS_ENUMS: Dict[EntityType, Type[WireEnum]] = {
    EntityType.ACQUISITION: AcquisitionStatus,
    EntityType.ORDER: OrderStatus,
    EntityType.PRODUCTION_PLAN: ProductionPlanStatus,
    EntityType.RECYCLABLE_PRODUCTION_PLAN: ProductionPlanStatus,
}

_SUBTYPE_ENUMS: Dict[EntityType, Type[WireEnum]] = {
    EntityType.ACQUISITION: AcquisitionType,
    EntityType.MATERIAL: MaterialType,
}

# Entities whose status is derived from the isActive flag
_ACTIVITY_ENTITIES = frozenset({EntityType.MATERIAL, EntityType.USER})

DUE_FIELDS: Dict[EntityType, str] = {
    EntityType.ACQUISITION: "dueDate",
    EntityType.ORDER: "expectedDeliveryDate",
    EntityType.PRODUCTION_PLAN: "plannedStartDate",
    EntityType.RECYCLABLE_PRODUCTION_PLAN: "plannedStartDate",
}


@dataclass(frozen=True)
class EntityRecord:
    """
    :param id: Server id of the entity
    :param entity_type: Which list the record belongs to
    :param status: Normalized status name (None for entities without a lifecycle)
    :param subtype: Normalized type name, e.g. "RecyclableMaterials"
    :param due_date: Aware UTC datetime or None
    :param server_flags: Server-computed availability flags (canEdit, canReceive, ...)
    :param data: The raw payload
    """

    id: Any
    entity_type: EntityType
    status: Optional[str] = None
    subtype: Optional[str] = None
    due_date: Optional[datetime] = None
    server_flags: Mapping[str, bool] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)

    def flag(self, name: str) -> Optional[bool]:
        """Returns a server flag or None when the payload did not carry it."""
        return self.server_flags.get(name)

    @classmethod
    def from_payload(cls, entity_type: EntityType | str, payload: Mapping[str, Any]) -> "EntityRecord":
        entity_type = EntityType(entity_type)
        data = dict(payload)

        if entity_type in _ACTIVITY_ENTITIES:
            status: Optional[str] = ActivityStatus.from_flag(data.get("isActive", True)).value
        else:
            status = _normalize(_STATUS_ENUMS.get(entity_type), data.get("status"), "status", entity_type)

        subtype = _normalize(_SUBTYPE_ENUMS.get(entity_type), data.get("type"), "type", entity_type)

        due_field = DUE_FIELDS.get(entity_type)
        due_date = parse_wire_datetime(data.get(due_field)) if due_field else None

        flags = {
            k: v for k, v in data.items()
            if k.startswith("can") and len(k) > 3 and k[3].isupper() and isinstance(v, bool)
        }

        return cls(
            id=data.get("id"),
            entity_type=entity_type,
            status=status,
            subtype=subtype,
            due_date=due_date,
            server_flags=flags,
            data=data,
        )


def _normalize(enum_cls: Optional[Type[WireEnum]], value: Any, what: str, entity_type: EntityType) -> Optional[str]:
    if value is None:
        return None
    if enum_cls is None:
        return str(value)
    try:
        return enum_cls.from_wire(value).value
    except ValueError:
        # keep the raw value; no lifecycle rule matches it, so no actions are offered
        logger.warning("Unrecognized %s %r for %s", what, value, entity_type.value)
        return str(value)
