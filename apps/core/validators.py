"""
Custom validators
"""
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _
import re


def validate_phone_number(value):
    """
    Validate phone number format
    """
    phone_regex = re.compile(r'^\+?\d{9,15}$')
    if not phone_regex.match(value):
        raise ValidationError(
            _('Phone number must be entered in the format: "+2348012345678". Up to 15 digits allowed.')
        )


def validate_postal_code(value):
    """
    Validate postal code format
    """
    if not re.match(r'^[A-Za-z0-9\s-]{3,10}$', value):
        raise ValidationError(
            _('Invalid postal code format.')
        )


def validate_duration(value):
    """
    Validate booking duration in minutes
    """
    if value < 15 or value > 240:
        raise ValidationError(
            _('Duration must be between 15 and 240 minutes.')
        )


def validate_latitude(value):
    if value < -90 or value > 90:
        raise ValidationError(_('Latitude must be between -90 and 90.'))


def validate_longitude(value):
    if value < -180 or value > 180:
        raise ValidationError(_('Longitude must be between -180 and 180.'))
