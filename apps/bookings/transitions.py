"""
Booking status transitions and per-role field allowlists.

Both tables are plain data so they can be audited and tested exhaustively.
"""
from apps.core.exceptions import Forbidden
from apps.core.utils.constants import (
    BOOKING_STATUS_AGENT_CONFIRMED,
    BOOKING_STATUS_CANCELLED,
    BOOKING_STATUS_COMPLETED,
    BOOKING_STATUS_CONFIRMED,
    BOOKING_STATUS_PAID,
    BOOKING_STATUS_PAYMENT_PENDING,
    BOOKING_STATUS_PENDING,
    BOOKING_STATUS_REJECTED,
    ROLE_SYSTEM,
    USER_ROLE_ADMIN,
    USER_ROLE_AGENT,
    USER_ROLE_USER,
)

# role -> current status -> statuses that role may move the booking to
ALLOWED_TRANSITIONS = {
    USER_ROLE_USER: {
        BOOKING_STATUS_PENDING: {BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_CONFIRMED: {BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_AGENT_CONFIRMED: {BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_PAYMENT_PENDING: {BOOKING_STATUS_CANCELLED},
    },
    USER_ROLE_AGENT: {
        BOOKING_STATUS_PENDING: {
            BOOKING_STATUS_CONFIRMED,
            BOOKING_STATUS_AGENT_CONFIRMED,
            BOOKING_STATUS_REJECTED,
        },
        BOOKING_STATUS_CONFIRMED: {BOOKING_STATUS_COMPLETED, BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_AGENT_CONFIRMED: {BOOKING_STATUS_PAID, BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_PAYMENT_PENDING: {BOOKING_STATUS_CANCELLED},
    },
    USER_ROLE_ADMIN: {
        BOOKING_STATUS_PENDING: {
            BOOKING_STATUS_CONFIRMED,
            BOOKING_STATUS_AGENT_CONFIRMED,
            BOOKING_STATUS_REJECTED,
            BOOKING_STATUS_CANCELLED,
        },
        BOOKING_STATUS_CONFIRMED: {BOOKING_STATUS_COMPLETED, BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_AGENT_CONFIRMED: {BOOKING_STATUS_PAID, BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_PAYMENT_PENDING: {BOOKING_STATUS_CANCELLED},
        BOOKING_STATUS_PAID: {BOOKING_STATUS_COMPLETED},
        BOOKING_STATUS_CANCELLED: {BOOKING_STATUS_PENDING},
    },
    # Payment reconciliation
    ROLE_SYSTEM: {
        BOOKING_STATUS_AGENT_CONFIRMED: {BOOKING_STATUS_COMPLETED},
        BOOKING_STATUS_PAYMENT_PENDING: {BOOKING_STATUS_COMPLETED},
        BOOKING_STATUS_PAID: {BOOKING_STATUS_COMPLETED},
    },
}

# role -> fields that role may change through the generic update endpoint
UPDATABLE_FIELDS = {
    USER_ROLE_USER: frozenset({'date', 'time_slot', 'message', 'contact_preference', 'number_of_persons'}),
    USER_ROLE_AGENT: frozenset({'status', 'agent', 'date', 'time_slot', 'message'}),
    USER_ROLE_ADMIN: frozenset({
        'status', 'agent', 'date', 'time_slot', 'message', 'price', 'payment_status',
    }),
}


def allowed_next_statuses(role, current_status):
    return ALLOWED_TRANSITIONS.get(role, {}).get(current_status, frozenset())


def can_transition(role, current_status, new_status):
    return new_status in allowed_next_statuses(role, current_status)


def assert_transition(role, current_status, new_status, error_class=Forbidden):
    """
    Raise `error_class` unless `role` may move a booking from
    `current_status` to `new_status`.
    """
    if not can_transition(role, current_status, new_status):
        raise error_class(
            f"A {role} cannot change a booking from '{current_status}' to '{new_status}'."
        )


def updatable_fields(role):
    return UPDATABLE_FIELDS.get(role, frozenset())


def filter_updatable(role, data):
    """Drop every key the role is not allowed to change."""
    allowed = updatable_fields(role)
    return {key: value for key, value in data.items() if key in allowed}
