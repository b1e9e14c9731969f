"""
Custom permission classes for role based access control.

Every staff role may read and work the queue and patient registry;
the finance, inventory and ward modules are limited to the roles that
operate them.  ``admin`` passes every check.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

ADMIN_ROLES = {"admin"}
CLINICAL_ROLES = ADMIN_ROLES | {"doctor", "nurse"}
FINANCE_ROLES = ADMIN_ROLES | {"billing"}
INVENTORY_ROLES = ADMIN_ROLES | {"pharmacy"}
FRONT_DESK_ROLES = ADMIN_ROLES | {"registration", "nurse", "billing"}


class RoleRequired(BasePermission):
    """Allow access only to users whose role is in ``roles``."""
    roles: set[str] = set()

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in self.roles)


class IsAdminRole(RoleRequired):
    roles = ADMIN_ROLES


class IsClinicalRole(RoleRequired):
    """Doctors and nurses (wards, maternity, ICU)."""
    roles = CLINICAL_ROLES


class IsFinanceRole(RoleRequired):
    """Billing officers (ledger, payables, receivables, cash, assets)."""
    roles = FINANCE_ROLES


class IsInventoryRole(RoleRequired):
    roles = INVENTORY_ROLES


class IsFrontDeskOrReadOnly(BasePermission):
    """Any authenticated user may read; registration staff may write."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        if request.method in SAFE_METHODS:
            return True
        return getattr(user, "role", None) in FRONT_DESK_ROLES


class ReadOnly(BasePermission):
    """Allow read-only access (GET, HEAD, OPTIONS)."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return request.method in SAFE_METHODS
