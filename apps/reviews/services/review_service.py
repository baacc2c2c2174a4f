"""
Review writes and the rating aggregate they maintain on Property.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Avg, Count, Q

from apps.core.exceptions import Forbidden, NotFound, ValidationFailed
from apps.core.utils.constants import BOOKING_STATUS_COMPLETED, USER_ROLE_ADMIN
from apps.notifications.models import NotificationType
from apps.notifications.services.dispatcher import notification_dispatcher
from apps.properties.models import Property
from apps.reviews.models import Review

logger = logging.getLogger(__name__)

DEFAULT_RATING_AVERAGE = Decimal('4.5')


class ReviewService:

    @staticmethod
    def recalculate_property_rating(property_id):
        """Refresh rating_average/rating_quantity from the remaining reviews."""
        stats = Review.objects.filter(property_id=property_id).aggregate(
            quantity=Count('id'),
            average=Avg('rating'),
        )
        if stats['quantity']:
            average = Decimal(str(stats['average'])).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
            quantity = stats['quantity']
        else:
            average, quantity = DEFAULT_RATING_AVERAGE, 0

        Property.all_objects.filter(pk=property_id).update(
            rating_average=average,
            rating_quantity=quantity,
        )

    @staticmethod
    def _notify_agent(review):
        agent = review.property.agent
        if agent is None or agent.pk == review.user_id:
            return
        notification_dispatcher.notify_user(
            agent,
            title='New review',
            message=f'"{review.property.title}" received a {review.rating}-star review.',
            notification_type=NotificationType.REVIEW,
            related_object=review,
            action_url=f"/properties/{review.property.slug}",
            icon='star',
            metadata={'property_id': str(review.property_id), 'review_id': str(review.id)},
        )

    @classmethod
    def create_review(cls, user, property_id, rating, comment) -> Review:
        try:
            prop = Property.objects.select_related('agent').get(pk=property_id)
        except (Property.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFound('No property found with that ID.')

        if Review.objects.filter(user=user, property=prop).exists():
            raise ValidationFailed('You have already reviewed this property.')

        verified = prop.bookings.filter(user=user, status=BOOKING_STATUS_COMPLETED).exists()

        try:
            with transaction.atomic():
                review = Review.objects.create(
                    property=prop,
                    user=user,
                    rating=rating,
                    comment=comment,
                    is_verified_purchase=verified,
                )
                cls.recalculate_property_rating(prop.pk)
        except IntegrityError:
            raise ValidationFailed('You have already reviewed this property.')

        cls._notify_agent(review)
        return review

    @staticmethod
    def check_can_modify(actor, review, allow_admin=False):
        if review.user_id == actor.id:
            return
        if allow_admin and actor.role == USER_ROLE_ADMIN:
            return
        raise Forbidden('You can only modify your own reviews.')

    @classmethod
    def update_review(cls, actor, review, validated_data) -> Review:
        cls.check_can_modify(actor, review)
        with transaction.atomic():
            for key, value in validated_data.items():
                setattr(review, key, value)
            review.save()
            cls.recalculate_property_rating(review.property_id)
        return review

    @classmethod
    def delete_review(cls, actor, review):
        cls.check_can_modify(actor, review, allow_admin=True)
        property_id = review.property_id
        with transaction.atomic():
            review.delete()
            cls.recalculate_property_rating(property_id)

    @staticmethod
    def property_stats(property_id) -> dict:
        try:
            exists = Property.objects.filter(pk=property_id).exists()
        except (ValueError, DjangoValidationError):
            exists = False
        if not exists:
            raise NotFound('No property found with that ID.')

        stars = {
            str(star): Count('id', filter=Q(rating__gte=star, rating__lt=star + 1))
            for star in range(1, 6)
        }
        stats = Review.objects.filter(property_id=property_id).aggregate(
            count=Count('id'),
            average=Avg('rating'),
            **{f'star_{key}': value for key, value in stars.items()},
        )
        average = stats['average']
        return {
            'count': stats['count'],
            'average': (
                Decimal(str(average)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
                if average is not None else None
            ),
            'distribution': {key: stats[f'star_{key}'] for key in stars},
        }


review_service = ReviewService()
