"""
Role helpers and DRF permission classes.

Roles are Django groups (see the create_user_groups command). A superuser is
always ADMIN; an authenticated user without a role group is STAFF.
"""
import hmac

from django.conf import settings
from rest_framework.permissions import BasePermission

ADMIN = 'ADMIN'
MANAGER = 'MANAGER'
STAFF = 'STAFF'

ROLE_GROUPS = {
    ADMIN: 'Admin',
    MANAGER: 'Manager',
    STAFF: 'Staff',
}

ROLE_HIERARCHY = {
    ADMIN: 3,
    MANAGER: 2,
    STAFF: 1,
}


def get_user_role(user):
    """Resolve the highest role the user holds, or None for anonymous users"""
    if not user or not user.is_authenticated:
        return None
    if user.is_superuser:
        return ADMIN
    group_names = set(user.groups.values_list('name', flat=True))
    for role in (ADMIN, MANAGER, STAFF):
        if ROLE_GROUPS[role] in group_names:
            return role
    return STAFF


def has_permission(user_role, required_role):
    """True when user_role sits at or above required_role in the hierarchy"""
    return ROLE_HIERARCHY.get(user_role, 0) >= ROLE_HIERARCHY.get(required_role, 0)


def is_admin_user(user):
    return get_user_role(user) == ADMIN


def assign_role(user, role):
    """Replace the user's role groups with the single group for role"""
    from django.contrib.auth.models import Group

    user.groups.remove(*Group.objects.filter(name__in=ROLE_GROUPS.values()))
    group, _ = Group.objects.get_or_create(name=ROLE_GROUPS[role])
    user.groups.add(group)


class IsAdminRole(BasePermission):
    message = 'Admin access required.'

    def has_permission(self, request, view):
        return has_permission(get_user_role(request.user), ADMIN)


class IsManagerOrAdmin(BasePermission):
    message = 'Manager or admin access required.'

    def has_permission(self, request, view):
        return has_permission(get_user_role(request.user), MANAGER)


class HasDashboardApiKey(BasePermission):
    """Machine access via the X-API-Key header"""
    message = 'Invalid or missing API key.'

    def has_permission(self, request, view):
        expected = settings.DASHBOARD_API_KEY
        provided = request.headers.get('X-API-Key', '')
        if not expected or not provided:
            return False
        return hmac.compare_digest(provided, expected)


class IsAuthenticatedOrApiKey(BasePermission):
    message = 'Authentication credentials were not provided.'

    def has_permission(self, request, view):
        if request.user and request.user.is_authenticated:
            return True
        return HasDashboardApiKey().has_permission(request, view)
