"""Built-in listing specs for the nine list screens."""

from __future__ import annotations

from typing import Dict, Optional, Sequence

from capabilities.enum.capability import Capability as C
from capabilities.logic.capability_gate import GateConstraints
from core.models.entity import EntityType
from lifecycle.enum.statuses import (
    AcquisitionStatus,
    AcquisitionType,
    MaterialType,
    OrderStatus,
    ProductionPlanStatus,
)
from listing.dto.collection_query import SortOrder
from listing.models.listing_spec import FilterSpec, ListingSpec, RowAction, SortColumn

ASC, DESC = SortOrder.ASC, SortOrder.DESC

_ACTIVE_FILTER = FilterSpec("isActive", (True, False))


def _action(name: str, capability: C) -> RowAction:
    return RowAction(name, GateConstraints(required=capability))


def _values(enum_cls) -> tuple:
    return tuple(m.value for m in enum_cls)


def build_listing_registry(
    *,
    page_size_options: Sequence[int] = (10, 25, 50),
    default_page_size: int = 10,
) -> Dict[EntityType, ListingSpec]:
    """Return one ListingSpec per entity type, sharing the configured page sizes."""
    sizes = tuple(page_size_options)
    common = dict(page_size_options=sizes, default_page_size=default_page_size)

    specs = [
        ListingSpec(
            entity_type=EntityType.ACQUISITION,
            sort_columns=(
                SortColumn("title", "Title", ASC),
                SortColumn("status", "Status", ASC),
                SortColumn("created", "CreatedAt", DESC),
                SortColumn("due", "DueDate", ASC),
            ),
            default_sort="created",
            filters=(
                FilterSpec("status", _values(AcquisitionStatus)),
                FilterSpec("type", _values(AcquisitionType)),
            ),
            search_fields=("title", "description", "supplierName"),
            view_capability=C.ACQUISITIONS_VIEW_TAB,
            create=_action("create", C.ACQUISITIONS_CREATE),
            row_actions=(_action("view", C.ACQUISITIONS_VIEW),),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.MATERIAL,
            sort_columns=(
                SortColumn("name", "name", ASC),
                SortColumn("quantity", "quantity", ASC),
                SortColumn("updated", "updated", ASC),
            ),
            default_sort="name",
            filters=(FilterSpec("type", _values(MaterialType)), _ACTIVE_FILTER),
            search_fields=("name", "color", "quantityType", "description"),
            view_capability=C.INVENTORY_VIEW_TAB,
            create=_action("create", C.INVENTORY_ADD),
            row_actions=(_action("view", C.INVENTORY_VIEW),),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.PRODUCTION_PLAN,
            sort_columns=(
                SortColumn("name", "Name", ASC),
                SortColumn("status", "Status", ASC),
                SortColumn("created", "CreatedAt", DESC),
                SortColumn("start", "PlannedStartDate", ASC),
            ),
            default_sort="created",
            filters=(FilterSpec("status", _values(ProductionPlanStatus)),),
            search_fields=("name", "description", "productName"),
            view_capability=C.PRODUCTION_VIEW_TAB,
            create=_action("create", C.PRODUCTION_CREATE),
            row_actions=(_action("view", C.PRODUCTION_VIEW),),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.RECYCLABLE_PRODUCTION_PLAN,
            sort_columns=(
                SortColumn("name", "name", ASC),
                SortColumn("status", "status", ASC),
                SortColumn("created", "createdAt", DESC),
            ),
            default_sort="created",
            filters=(FilterSpec("status", _values(ProductionPlanStatus)),),
            search_fields=("name", "description"),
            view_capability=C.PRODUCTION_VIEW_TAB,
            create=_action("create", C.PRODUCTION_CREATE),
            row_actions=(_action("view", C.PRODUCTION_VIEW),),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.ORDER,
            sort_columns=(
                SortColumn("client", "ClientName", ASC),
                SortColumn("status", "Status", ASC),
                SortColumn("created", "CreatedAt", DESC),
                SortColumn("delivery", "ExpectedDeliveryDate", ASC),
            ),
            default_sort="created",
            filters=(FilterSpec("status", _values(OrderStatus)),),
            search_fields=("clientName", "notes", "description"),
            view_capability=C.ORDERS_VIEW_TAB,
            create=_action("create", C.ORDERS_CREATE),
            row_actions=(_action("view", C.ORDERS_VIEW),),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.CLIENT,
            sort_columns=(
                SortColumn("name", "Name", ASC),
                SortColumn("email", "Email", ASC),
                SortColumn("phone", "Phone", ASC),
            ),
            default_sort="name",
            filters=(_ACTIVE_FILTER,),
            search_fields=("name", "email", "phone", "contactPerson"),
            view_capability=C.CLIENTS_VIEW_TAB,
            create=_action("create", C.CLIENTS_CREATE),
            row_actions=(
                _action("view", C.CLIENTS_VIEW),
                _action("edit", C.CLIENTS_EDIT),
                _action("delete", C.CLIENTS_DELETE),
            ),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.SUPPLIER,
            sort_columns=(
                SortColumn("name", "Name", ASC),
                SortColumn("email", "Email", ASC),
                SortColumn("phone", "Phone", ASC),
            ),
            default_sort="name",
            filters=(_ACTIVE_FILTER,),
            search_fields=("name", "email", "phone", "contactPerson"),
            view_capability=C.SUPPLIERS_VIEW_TAB,
            create=_action("create", C.SUPPLIERS_CREATE),
            row_actions=(
                _action("view", C.SUPPLIERS_VIEW),
                _action("edit", C.SUPPLIERS_EDIT),
                _action("delete", C.SUPPLIERS_DELETE),
            ),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.TRANSPORT,
            sort_columns=(
                SortColumn("car", "carName", ASC),
                SortColumn("plate", "numberPlate", ASC),
                SortColumn("phone", "phoneNumber", ASC),
            ),
            default_sort="car",
            search_fields=("carName", "driverName", "numberPlate"),
            view_capability=C.TRANSPORTS_VIEW_TAB,
            create=_action("create", C.TRANSPORTS_CREATE),
            row_actions=(
                _action("view", C.TRANSPORTS_VIEW),
                _action("edit", C.TRANSPORTS_EDIT),
                _action("delete", C.TRANSPORTS_DELETE),
            ),
            **common,
        ),
        ListingSpec(
            entity_type=EntityType.USER,
            sort_columns=(
                SortColumn("username", "Username", ASC),
                SortColumn("role", "Role", ASC),
                SortColumn("created", "CreatedAt", DESC),
            ),
            default_sort="username",
            filters=(_ACTIVE_FILTER, FilterSpec("role")),
            search_fields=("username", "email", "role"),
            view_capability=C.USERS_VIEW_TAB,
            create=_action("create", C.USERS_CREATE),
            row_actions=(_action("view", C.USERS_VIEW),),
            **common,
        ),
    ]
    return {spec.entity_type: spec for spec in specs}


_DEFAULT_REGISTRY: Optional[Dict[EntityType, ListingSpec]] = None


def get_listing_spec(entity_type: EntityType | str) -> ListingSpec:
    """Listing spec from the default registry (default page sizes)."""
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = build_listing_registry()
    return _DEFAULT_REGISTRY[EntityType(entity_type)]
