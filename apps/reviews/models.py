"""
Property reviews
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.core.models import BaseModel


class Review(BaseModel):
    property = models.ForeignKey(
        'properties.Property',
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='reviews'
    )
    rating = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        validators=[MinValueValidator(Decimal('1')), MaxValueValidator(Decimal('5'))]
    )
    comment = models.TextField()
    is_verified_purchase = models.BooleanField(default=False)

    class Meta:
        db_table = 'reviews'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['property', '-rating']),
            models.Index(fields=['-rating', '-created_at']),
        ]
        constraints = [
            models.UniqueConstraint(fields=['user', 'property'], name='unique_review_per_user_property'),
        ]

    def __str__(self):
        return f"{self.rating} by {self.user_id} on {self.property_id}"
