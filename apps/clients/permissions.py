"""
Permission classes shared by the tenant-scoped apps.

Every client, session, package and payment has an ``owner``; only that
therapist may see or touch it.
"""
from rest_framework.permissions import BasePermission


class IsOwner(BasePermission):
    """
    Object-level permission: ``obj.owner`` must be the requesting user.

    Querysets are already filtered by owner, so in practice other tenants'
    objects surface as 404 before this check runs.
    """

    message = 'You do not have access to this record.'

    def has_object_permission(self, request, view, obj):
        return obj.owner_id == request.user.id
