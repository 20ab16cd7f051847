"""Status and type enumerations of lifecycle entities.

Members are declared in the server's ordinal order, so a status delivered as
an integer maps to the member at that position.
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class WireEnum(str, Enum):
    """String enum that also accepts the server's ordinal encoding."""

    @classmethod
    def from_wire(cls, value: Any):
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid {cls.__name__} value: {value!r}")
        if isinstance(value, int):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            raise ValueError(f"Invalid {cls.__name__} ordinal: {value!r}")

        raw = str(value or "").strip()
        for member in cls:
            if member.value.lower() == raw.lower() or member.name.lower() == raw.lower():
                return member
        if raw.isdigit():
            return cls.from_wire(int(raw))
        raise ValueError(f"Invalid {cls.__name__} value: {value!r}")


class AcquisitionStatus(WireEnum):
    DRAFT = "Draft"
    RECEIVED = "Received"
    CANCELLED = "Cancelled"
    READY_FOR_PROCESSING = "ReadyForProcessing"


class AcquisitionType(WireEnum):
    RAW_MATERIALS = "RawMaterials"
    RECYCLABLE_MATERIALS = "RecyclableMaterials"


class OrderStatus(WireEnum):
    DRAFT = "Draft"
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class ProductionPlanStatus(WireEnum):
    DRAFT = "Draft"
    PLANNED = "Planned"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class MaterialType(WireEnum):
    RAW_MATERIAL = "RawMaterial"
    RECYCLABLE_MATERIAL = "RecyclableMaterial"
    FINISHED_PRODUCT = "FinishedProduct"


class ActivityStatus(WireEnum):
    """Derived status of entities that only carry an ``isActive`` flag."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"

    @classmethod
    def from_flag(cls, is_active: Any) -> "ActivityStatus":
        return cls.ACTIVE if bool(is_active) else cls.INACTIVE
