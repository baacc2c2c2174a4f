"""
User model with role-based access (user, agent, admin)
"""
import uuid

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from apps.core.utils.constants import (
    AGENT_SPECIALIZATIONS,
    AGENT_STATUS_APPROVED,
    AGENT_STATUS_NONE,
    AGENT_STATUSES,
    USER_ROLE_ADMIN,
    USER_ROLE_AGENT,
    USER_ROLE_USER,
    USER_ROLES,
)
from apps.core.validators import validate_phone_number
from .managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom user model. Agents are users with role=agent whose application
    has been approved by an administrator.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Basic fields
    email = models.EmailField(unique=True, db_index=True)
    name = models.CharField(max_length=150)
    phone = models.CharField(max_length=20, blank=True, validators=[validate_phone_number])
    photo = models.CharField(max_length=255, default='default.jpg')
    bio = models.TextField(max_length=500, blank=True)

    # User role
    role = models.CharField(
        max_length=20,
        choices=USER_ROLES,
        default=USER_ROLE_USER,
        db_index=True
    )

    # Agent profile
    agency = models.CharField(max_length=150, blank=True)
    specialization = models.CharField(max_length=20, choices=AGENT_SPECIALIZATIONS, blank=True)
    agent_status = models.CharField(
        max_length=20,
        choices=AGENT_STATUSES,
        default=AGENT_STATUS_NONE
    )

    # Status
    is_active = models.BooleanField(default=True)
    email_verified = models.BooleanField(default=False)
    password_changed_at = models.DateTimeField(null=True, blank=True)

    # Admin fields
    is_staff = models.BooleanField(default=False)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        db_table = 'users'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        ordering = ['-created_at']

    def __str__(self):
        return self.email

    @property
    def full_name(self):
        return self.name or self.email

    def is_agent(self):
        return self.role == USER_ROLE_AGENT

    def is_admin(self):
        return self.role == USER_ROLE_ADMIN

    def is_approved_agent(self):
        return self.role == USER_ROLE_AGENT and self.agent_status == AGENT_STATUS_APPROVED

    def changed_password_after(self, issued_at):
        """True if the password was changed after a token issued at `issued_at` (epoch seconds)."""
        if not self.password_changed_at:
            return False
        return int(self.password_changed_at.timestamp()) > int(issued_at)
