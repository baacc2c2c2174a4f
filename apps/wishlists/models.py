"""
Saved properties
"""
from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.models import SoftDeleteModel


class WishlistItem(SoftDeleteModel):
    """
    A property saved by a user. Removing an item deactivates it so notes and
    tags come back if the property is saved again.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='wishlist_items'
    )
    property = models.ForeignKey(
        'properties.Property',
        on_delete=models.CASCADE,
        related_name='wishlist_items'
    )
    notes = models.CharField(max_length=200, blank=True)
    tags = models.JSONField(default=list, blank=True)
    priority = models.PositiveSmallIntegerField(
        default=3,
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    reminder_date = models.DateTimeField(null=True, blank=True)
    custom_name = models.CharField(max_length=50, blank=True)
    views = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'wishlist_items'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at']),
            models.Index(fields=['user', '-priority']),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'property'],
                condition=models.Q(is_active=True),
                name='unique_active_wishlist_item',
            ),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.property_id}"
