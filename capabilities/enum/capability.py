"""capabilities/enum/capability.py
================================

Canonical capability keys shared by console and server.

Keys are namespaced ``"<Domain>.<Action>"``. The set is closed: screens and
services use these members instead of hardcoding strings, and a key outside
the enumeration is a programming error.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, List

from core.exceptions.errors import UnknownCapabilityError


class Capability(str, Enum):
    """Supported capabilities."""

    # Acquisitions
    ACQUISITIONS_VIEW_TAB = "Acquisitions.ViewTab"
    ACQUISITIONS_CREATE = "Acquisitions.Create"
    ACQUISITIONS_VIEW = "Acquisitions.View"
    ACQUISITIONS_EDIT = "Acquisitions.Edit"
    ACQUISITIONS_CANCEL = "Acquisitions.Cancel"
    ACQUISITIONS_RECEIVE = "Acquisitions.Receive"
    ACQUISITIONS_PROCESS = "Acquisitions.Process"

    # Inventory
    INVENTORY_VIEW_TAB = "Inventory.ViewTab"
    INVENTORY_ADD = "Inventory.Add"
    INVENTORY_EDIT = "Inventory.Edit"
    INVENTORY_VIEW = "Inventory.View"
    INVENTORY_DEACTIVATE = "Inventory.Deactivate"
    INVENTORY_ACTIVATE = "Inventory.Activate"

    # Production
    PRODUCTION_VIEW_TAB = "Production.ViewTab"
    PRODUCTION_CREATE = "Production.Create"
    PRODUCTION_EDIT = "Production.Edit"
    PRODUCTION_VIEW = "Production.View"
    PRODUCTION_CANCEL = "Production.Cancel"
    PRODUCTION_EXECUTE = "Production.Execute"
    PRODUCTION_RECEIVE = "Production.Receive"

    # Orders
    ORDERS_VIEW_TAB = "Orders.ViewTab"
    ORDERS_CREATE = "Orders.Create"
    ORDERS_EDIT = "Orders.Edit"
    ORDERS_VIEW = "Orders.View"
    ORDERS_CANCEL = "Orders.Cancel"
    ORDERS_PROCESS = "Orders.Process"

    # Users
    USERS_VIEW_TAB = "Users.ViewTab"
    USERS_CREATE = "Users.Create"
    USERS_EDIT = "Users.Edit"
    USERS_VIEW = "Users.View"
    USERS_DEACTIVATE = "Users.Deactivate"
    USERS_ACTIVATE = "Users.Activate"

    # Transports
    TRANSPORTS_VIEW_TAB = "Transports.ViewTab"
    TRANSPORTS_CREATE = "Transports.Create"
    TRANSPORTS_VIEW = "Transports.View"
    TRANSPORTS_EDIT = "Transports.Edit"
    TRANSPORTS_DELETE = "Transports.Delete"

    # Clients
    CLIENTS_VIEW_TAB = "Clients.ViewTab"
    CLIENTS_CREATE = "Clients.Create"
    CLIENTS_VIEW = "Clients.View"
    CLIENTS_EDIT = "Clients.Edit"
    CLIENTS_DELETE = "Clients.Delete"

    # Suppliers
    SUPPLIERS_VIEW_TAB = "Suppliers.ViewTab"
    SUPPLIERS_CREATE = "Suppliers.Create"
    SUPPLIERS_VIEW = "Suppliers.View"
    SUPPLIERS_EDIT = "Suppliers.Edit"
    SUPPLIERS_DELETE = "Suppliers.Delete"

    # Roles
    ROLES_VIEW_TAB = "Roles.ViewTab"
    ROLES_MANAGE_PERMISSIONS = "Roles.ManagePermissions"

    @property
    def domain(self) -> str:
        return self.value.split(".", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(".", 1)[1]

    @classmethod
    def parse(cls, key: "Capability | str") -> "Capability":
        """Return the member for ``key`` or raise UnknownCapabilityError."""
        if isinstance(key, cls):
            return key
        raw = str(key or "").strip()
        try:
            return cls(raw)
        except ValueError:
            raise UnknownCapabilityError(f"Unknown capability key: {raw!r}") from None

    @classmethod
    def by_domain(cls) -> Dict[str, List["Capability"]]:
        """Group all capabilities by their domain, in declaration order."""
        groups: Dict[str, List[Capability]] = {}
        for member in cls:
            groups.setdefault(member.domain, []).append(member)
        return groups
