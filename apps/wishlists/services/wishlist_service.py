"""
Wishlist operations.

Every activation or deactivation of an item moves the property's
`wishlist_count` by one, in the same transaction.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, F, Sum

from apps.core.exceptions import NotFound, ValidationFailed
from apps.core.utils.constants import PROPERTY_STATUSES, PROPERTY_TYPES
from apps.properties.models import Property
from apps.wishlists.models import WishlistItem

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 3


class WishlistService:
    """
    Adds, toggles and removes saved properties for one user at a time.
    """

    @staticmethod
    def get_property(property_id) -> Property:
        try:
            return Property.objects.get(pk=property_id)
        except (Property.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound('No property found with that ID.')

    @staticmethod
    def increment_count(property_id):
        Property.all_objects.filter(pk=property_id).update(wishlist_count=F('wishlist_count') + 1)

    @staticmethod
    def decrement_count(property_id):
        Property.all_objects.filter(pk=property_id, wishlist_count__gt=0).update(
            wishlist_count=F('wishlist_count') - 1
        )

    @staticmethod
    def _latest_item(user, property_id):
        return (
            WishlistItem.all_objects
            .select_for_update()
            .filter(user=user, property_id=property_id)
            .order_by('-updated_at')
            .first()
        )

    @classmethod
    def add_item(cls, user, property_id, **fields) -> Tuple[WishlistItem, bool]:
        """
        Save a property. Returns (item, created); an inactive item for the
        same property is reactivated instead of creating a new row.
        """
        prop = cls.get_property(property_id)

        with transaction.atomic():
            item = cls._latest_item(user, prop.pk)
            if item is not None and item.is_active:
                raise ValidationFailed('Property already in your wishlist.')

            if item is not None:
                item.is_active = True
                for key, value in fields.items():
                    if value not in (None, '', []):
                        setattr(item, key, value)
                item.save()
                created = False
            else:
                try:
                    with transaction.atomic():
                        item = WishlistItem.objects.create(user=user, property=prop, **fields)
                except IntegrityError:
                    raise ValidationFailed('Property already in your wishlist.')
                created = True

            cls.increment_count(prop.pk)

        return item, created

    @classmethod
    def deactivate(cls, item: WishlistItem):
        with transaction.atomic():
            updated = WishlistItem.objects.filter(pk=item.pk).update(is_active=False)
            if updated:
                cls.decrement_count(item.property_id)
        item.is_active = False

    @classmethod
    def delete_item(cls, item: WishlistItem):
        with transaction.atomic():
            if item.is_active:
                cls.decrement_count(item.property_id)
            item.delete()

    @classmethod
    def remove_property(cls, user, property_id):
        try:
            item = WishlistItem.objects.get(user=user, property_id=property_id)
        except (WishlistItem.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound('Property not found in your wishlist.')
        cls.deactivate(item)

    @classmethod
    def toggle(cls, user, property_id) -> Tuple[WishlistItem, bool]:
        """
        Flip a property in or out of the wishlist. Returns (item, created).
        """
        prop = cls.get_property(property_id)

        with transaction.atomic():
            item = cls._latest_item(user, prop.pk)
            if item is None:
                item = WishlistItem.objects.create(user=user, property=prop, priority=DEFAULT_PRIORITY)
                cls.increment_count(prop.pk)
                return item, True

            item.is_active = not item.is_active
            item.save(update_fields=['is_active', 'updated_at'])
            if item.is_active:
                cls.increment_count(prop.pk)
            else:
                cls.decrement_count(prop.pk)
            return item, False

    @classmethod
    def bulk_add(cls, user, property_ids: List) -> Dict:
        unique_ids = list(dict.fromkeys(str(pid) for pid in property_ids))
        try:
            found = set(
                str(pk) for pk in Property.objects.filter(pk__in=unique_ids).values_list('pk', flat=True)
            )
        except (ValueError, DjangoValidationError):
            raise ValidationFailed('Property IDs must be valid UUIDs.')
        if len(found) != len(unique_ids):
            raise NotFound('Some properties were not found.')

        existing = set(
            str(pk) for pk in WishlistItem.objects.filter(
                user=user, property_id__in=unique_ids
            ).values_list('property_id', flat=True)
        )

        created = []
        with transaction.atomic():
            for property_id in unique_ids:
                if property_id in existing:
                    continue
                item, _ = cls.add_item(user, property_id)
                created.append(item)

        return {'created': created, 'skipped': len(existing)}

    @classmethod
    def clear(cls, user) -> int:
        with transaction.atomic():
            property_ids = list(
                WishlistItem.objects.filter(user=user).values_list('property_id', flat=True)
            )
            WishlistItem.objects.filter(user=user).update(is_active=False)
            for property_id in property_ids:
                cls.decrement_count(property_id)
        return len(property_ids)

    @staticmethod
    def stats(user) -> Dict:
        items = WishlistItem.objects.filter(user=user, property__is_active=True)
        totals = items.aggregate(
            total_items=Count('id'),
            total_value=Sum('property__price'),
            average_priority=Avg('priority'),
        )

        type_counts = dict(
            items.values_list('property__property_type').annotate(total=Count('id')).order_by()
        )
        status_counts = dict(
            items.values_list('property__status').annotate(total=Count('id')).order_by()
        )

        average = totals['average_priority']
        return {
            'total_items': totals['total_items'],
            'total_value': totals['total_value'] or Decimal('0'),
            'average_priority': round(average, 2) if average is not None else None,
            'property_type_breakdown': {value: type_counts.get(value, 0) for value, _ in PROPERTY_TYPES},
            'status_breakdown': {value: status_counts.get(value, 0) for value, _ in PROPERTY_STATUSES},
        }


wishlist_service = WishlistService()
