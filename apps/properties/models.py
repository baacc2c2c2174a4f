"""
Property listing model
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinLengthValidator, MinValueValidator
from django.db import models
from django.utils.text import slugify

from apps.core.models import SoftDeleteModel
from apps.core.utils.constants import (
    LISTING_TYPE_SALE,
    LISTING_TYPES,
    PROPERTY_STATUS_AVAILABLE,
    PROPERTY_STATUSES,
    PROPERTY_TYPES,
)
from apps.core.validators import validate_latitude, validate_longitude, validate_postal_code


class Property(SoftDeleteModel):
    """
    A listed property. `agent` manages the listing and bookings against it;
    `owner` is the account that created it.
    """
    title = models.CharField(
        max_length=100,
        unique=True,
        validators=[MinLengthValidator(10)]
    )
    slug = models.SlugField(max_length=120, unique=True, blank=True)
    description = models.TextField(validators=[MinLengthValidator(50)])

    # Pricing
    price = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0'))]
    )
    price_discount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=PROPERTY_STATUSES,
        default=PROPERTY_STATUS_AVAILABLE,
        db_index=True
    )
    property_type = models.CharField(max_length=20, choices=PROPERTY_TYPES)
    listing_type = models.CharField(max_length=10, choices=LISTING_TYPES, default=LISTING_TYPE_SALE)

    # Characteristics
    bedrooms = models.PositiveSmallIntegerField(default=0)
    bathrooms = models.PositiveSmallIntegerField(default=0)
    area = models.PositiveIntegerField(help_text='Floor area in square meters')
    year_built = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1800)]
    )
    amenities = models.JSONField(default=dict, blank=True)
    images = models.JSONField(default=list, blank=True)

    # Location
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100, db_index=True)
    state = models.CharField(max_length=100)
    zip_code = models.CharField(max_length=10, blank=True, validators=[validate_postal_code])
    country = models.CharField(max_length=100, default='Nigeria')
    latitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True, validators=[validate_latitude]
    )
    longitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True, validators=[validate_longitude]
    )

    # People
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='listed_properties'
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='owned_properties'
    )

    # Denormalized counters
    rating_average = models.DecimalField(
        max_digits=2,
        decimal_places=1,
        default=Decimal('4.5'),
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    rating_quantity = models.PositiveIntegerField(default=0)
    wishlist_count = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'properties'
        verbose_name = 'Property'
        verbose_name_plural = 'Properties'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['city', 'status']),
            models.Index(fields=['price', 'rating_average']),
            models.Index(fields=['agent', 'is_active']),
        ]

    def __str__(self):
        return f"{self.title} - {self.city}"

    def save(self, *args, **kwargs):
        if not self.slug or self._title_changed():
            self.slug = self._unique_slug()
        super().save(*args, **kwargs)

    def _unique_slug(self):
        base = slugify(self.title)[:110] or 'property'
        slug, suffix = base, 2
        while Property.all_objects.filter(slug=slug).exclude(pk=self.pk).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def _title_changed(self):
        if self._state.adding:
            return False
        previous = Property.all_objects.filter(pk=self.pk).values_list('title', flat=True).first()
        return previous is not None and previous != self.title

    @property
    def is_available(self):
        return self.is_active and self.status == PROPERTY_STATUS_AVAILABLE

    @property
    def address(self):
        return {
            'street': self.street,
            'city': self.city,
            'state': self.state,
            'zip_code': self.zip_code,
            'country': self.country,
        }
