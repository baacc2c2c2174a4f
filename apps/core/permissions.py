"""
Custom permissions for EstateHub
"""
from rest_framework import permissions

from apps.core.utils.constants import USER_ROLE_ADMIN, USER_ROLE_AGENT


class IsAgent(permissions.BasePermission):
    """Permission check for agents"""
    message = "Only agents can perform this action"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == USER_ROLE_AGENT
        )


class IsAdmin(permissions.BasePermission):
    """Permission check for administrators"""
    message = "Only administrators can perform this action"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role == USER_ROLE_ADMIN
        )


class IsAgentOrAdmin(permissions.BasePermission):
    """Permission for actions that both agents and admins can perform"""
    message = "Only agents or administrators can perform this action"

    def has_permission(self, request, view):
        return (
            request.user and
            request.user.is_authenticated and
            request.user.role in [USER_ROLE_AGENT, USER_ROLE_ADMIN]
        )


class IsListingAgentOrAdmin(permissions.BasePermission):
    """Object permission for the agent who listed a property"""
    message = "You can only modify properties you listed"

    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        if not request.user.is_authenticated:
            return False
        if request.user.role == USER_ROLE_ADMIN:
            return True
        return request.user.role == USER_ROLE_AGENT and obj.agent_id == request.user.id


class IsBookingParticipant(permissions.BasePermission):
    """Permission check for booking access"""
    message = "You do not have permission to access this booking"

    def has_object_permission(self, request, view, obj):
        if not request.user.is_authenticated:
            return False

        if request.user.role == USER_ROLE_ADMIN:
            return True

        # Agents see bookings assigned to them
        if request.user.role == USER_ROLE_AGENT:
            return obj.agent_id == request.user.id or obj.user_id == request.user.id

        return obj.user_id == request.user.id
