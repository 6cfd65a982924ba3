# permissions/roles.py

from __future__ import annotations

from typing import Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (WAREHOUSE JOB ROLES)
# =========================================================
# Resolved from user.role when the user model has one,
# otherwise from the user's Django auth group names.
ROLE_ADMIN = "admin"
ROLE_MANAGER = "manager"
ROLE_RECEIVER = "receiver"  # goods-in: records supplier deliveries
ROLE_PICKER = "picker"      # order preparation: plans + commits allocations

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_RECEIVER,
    ROLE_PICKER,
}


# =========================================================
# CAPABILITIES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect capabilities, not raw roles.
CAP_INVENTORY_VIEW = "inventory.view"
CAP_INVENTORY_RECEIVE = "inventory.receive"
CAP_INVENTORY_ALLOCATE = "inventory.allocate"
CAP_INVENTORY_ADJUST = "inventory.adjust"     # expiry sweep, manual overrides

ALL_CAPABILITIES = {
    CAP_INVENTORY_VIEW,
    CAP_INVENTORY_RECEIVE,
    CAP_INVENTORY_ALLOCATE,
    CAP_INVENTORY_ADJUST,
}


# =========================================================
# ROLE → CAPABILITY MAP
# =========================================================
ROLE_CAPABILITIES: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_CAPABILITIES,
    },
    ROLE_MANAGER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_RECEIVE,
        CAP_INVENTORY_ALLOCATE,
        CAP_INVENTORY_ADJUST,
    },
    ROLE_RECEIVER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_RECEIVE,
    },
    ROLE_PICKER: {
        CAP_INVENTORY_VIEW,
        CAP_INVENTORY_ALLOCATE,
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_roles(user) -> set[str]:
    roles = set()

    role = getattr(user, "role", None)
    if role:
        roles.add(str(role).strip().lower())

    groups = getattr(user, "groups", None)
    if groups is not None and getattr(user, "pk", None):
        for name in groups.values_list("name", flat=True):
            roles.add(str(name).strip().lower())

    return roles & STAFF_ROLES


def get_user_role(user) -> Optional[str]:
    """
    Single "primary" role (highest privilege first); None when the user has none.
    """
    roles = get_user_roles(user)
    for role in (ROLE_ADMIN, ROLE_MANAGER, ROLE_RECEIVER, ROLE_PICKER):
        if role in roles:
            return role
    return None


def effective_capabilities_for(user) -> set[str]:
    if getattr(user, "is_superuser", False):
        return set(ALL_CAPABILITIES)

    caps = set()
    for role in get_user_roles(user):
        caps |= ROLE_CAPABILITIES.get(role, set())
    return caps


def user_has_capability(user, capability: str) -> bool:
    if not user or not user.is_authenticated:
        return False
    return capability in effective_capabilities_for(user)


# =========================================================
# Capability Permissions
# =========================================================
class HasCapability(BasePermission):
    """
    Require a specific capability.

    Usage:
        permission_classes = [IsAuthenticated, HasCapability]
        view.required_capability = CAP_INVENTORY_RECEIVE

    ViewSets may instead define `capability_map = {action_name: capability}`.
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = None
        capability_map = getattr(view, "capability_map", None)
        if capability_map:
            required = capability_map.get(getattr(view, "action", None))
        if not required:
            required = getattr(view, "required_capability", None)

        if not required:
            # deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_capabilities_for(user)

