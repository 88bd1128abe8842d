"""Custom DRF permissions shared by owner-scoped resources."""

from rest_framework import permissions


class IsOwner(permissions.BasePermission):
    """Object-level check: only the owning user may act on the object."""

    def has_object_permission(self, request, view, obj):
        return getattr(obj, 'owner_id', None) == request.user.id
