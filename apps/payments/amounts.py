"""
Payment amount rules.

Amounts are whole currency units (naira). Paystack expects the minor unit
(kobo), see `to_minor_units`.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

from apps.core.exceptions import ValidationFailed
from apps.core.utils.constants import PAYMENT_TYPE_PURCHASE, PAYMENT_TYPE_RENTAL

# Rent is collected as 1.5x caution deposit plus the first period's rent
RENTAL_DEPOSIT_MULTIPLIER = Decimal('1.5')

# Amounts at or below this are left alone in test mode
TEST_MODE_SCALE_THRESHOLD = Decimal('10000')


def _round_whole(value: Decimal) -> Decimal:
    return value.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def rental_amount(rent) -> Decimal:
    rent = Decimal(rent or 0)
    fee = Decimal(settings.RENTAL_PROCESSING_FEE)
    return _round_whole(rent * RENTAL_DEPOSIT_MULTIPLIER + rent + fee)


def calculate_amount(booking, payment_type: str) -> Decimal:
    """
    Amount the requester must pay for `booking`.

    Purchases pay the agreed booking price. Rentals pay deposit, first rent
    and processing fee, where rent falls back to the listing price.
    """
    if payment_type == PAYMENT_TYPE_PURCHASE:
        return Decimal(booking.price or 0)
    if payment_type == PAYMENT_TYPE_RENTAL:
        return rental_amount(booking.price or booking.property.price)
    raise ValidationFailed(f"Invalid payment type '{payment_type}'.")


def apply_test_mode_scaling(amount: Decimal) -> Decimal:
    """
    Shrink large amounts so sandbox transactions stay under provider limits.

    Only active when PAYMENTS_TEST_MODE is set.
    """
    if not settings.PAYMENTS_TEST_MODE or amount <= TEST_MODE_SCALE_THRESHOLD:
        return amount
    cap = Decimal(settings.PAYMENTS_TEST_MODE_MAX_AMOUNT)
    return min(cap, _round_whole(amount / 100))


def to_minor_units(amount: Decimal) -> int:
    return int(_round_whole(Decimal(amount) * 100))
