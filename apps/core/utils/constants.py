"""
Application-wide constants
"""

# User roles
USER_ROLE_USER = 'user'
USER_ROLE_AGENT = 'agent'
USER_ROLE_ADMIN = 'admin'

USER_ROLES = [
    (USER_ROLE_USER, 'User'),
    (USER_ROLE_AGENT, 'Agent'),
    (USER_ROLE_ADMIN, 'Admin'),
]

# Pseudo-role used by payment reconciliation; never stored on a user
ROLE_SYSTEM = 'system'

# Agent application statuses
AGENT_STATUS_NONE = 'none'
AGENT_STATUS_PENDING = 'pending'
AGENT_STATUS_APPROVED = 'approved'
AGENT_STATUS_REJECTED = 'rejected'

AGENT_STATUSES = [
    (AGENT_STATUS_NONE, 'None'),
    (AGENT_STATUS_PENDING, 'Pending'),
    (AGENT_STATUS_APPROVED, 'Approved'),
    (AGENT_STATUS_REJECTED, 'Rejected'),
]

AGENT_SPECIALIZATIONS = [
    ('residential', 'Residential'),
    ('commercial', 'Commercial'),
    ('land', 'Land'),
    ('luxury', 'Luxury'),
    ('rental', 'Rental'),
]

# Property statuses
PROPERTY_STATUS_AVAILABLE = 'available'
PROPERTY_STATUS_BOOKED = 'booked'
PROPERTY_STATUS_PENDING = 'pending'
PROPERTY_STATUS_SOLD = 'sold'
PROPERTY_STATUS_RENTED = 'rented'

PROPERTY_STATUSES = [
    (PROPERTY_STATUS_AVAILABLE, 'Available'),
    (PROPERTY_STATUS_BOOKED, 'Booked'),
    (PROPERTY_STATUS_PENDING, 'Pending'),
    (PROPERTY_STATUS_SOLD, 'Sold'),
    (PROPERTY_STATUS_RENTED, 'Rented'),
]

PROPERTY_TYPES = [
    ('apartment', 'Apartment'),
    ('house', 'House'),
    ('villa', 'Villa'),
    ('condo', 'Condo'),
    ('commercial', 'Commercial'),
    ('land', 'Land'),
    ('duplex', 'Duplex'),
]

LISTING_TYPE_SALE = 'sale'
LISTING_TYPE_RENT = 'rent'

LISTING_TYPES = [
    (LISTING_TYPE_SALE, 'Sale'),
    (LISTING_TYPE_RENT, 'Rent'),
]

# Booking types
BOOKING_TYPE_VIEWING = 'viewing'
BOOKING_TYPE_INQUIRY = 'inquiry'
BOOKING_TYPE_RENTAL = 'rental'
BOOKING_TYPE_PURCHASE = 'purchase'

BOOKING_TYPES = [
    (BOOKING_TYPE_VIEWING, 'Viewing'),
    (BOOKING_TYPE_INQUIRY, 'Inquiry'),
    (BOOKING_TYPE_RENTAL, 'Rental'),
    (BOOKING_TYPE_PURCHASE, 'Purchase'),
]

# Booking statuses
BOOKING_STATUS_PENDING = 'pending'
BOOKING_STATUS_CONFIRMED = 'confirmed'
BOOKING_STATUS_AGENT_CONFIRMED = 'agent_confirmed'
BOOKING_STATUS_PAYMENT_PENDING = 'payment_pending'
BOOKING_STATUS_PAID = 'paid'
BOOKING_STATUS_COMPLETED = 'completed'
BOOKING_STATUS_CANCELLED = 'cancelled'
BOOKING_STATUS_REJECTED = 'rejected'
BOOKING_STATUS_PROPERTY_SOLD = 'property_sold'

BOOKING_STATUSES = [
    (BOOKING_STATUS_PENDING, 'Pending'),
    (BOOKING_STATUS_CONFIRMED, 'Confirmed'),
    (BOOKING_STATUS_AGENT_CONFIRMED, 'Agent Confirmed'),
    (BOOKING_STATUS_PAYMENT_PENDING, 'Payment Pending'),
    (BOOKING_STATUS_PAID, 'Paid'),
    (BOOKING_STATUS_COMPLETED, 'Completed'),
    (BOOKING_STATUS_CANCELLED, 'Cancelled'),
    (BOOKING_STATUS_REJECTED, 'Rejected'),
    (BOOKING_STATUS_PROPERTY_SOLD, 'Property Sold'),
]

# Statuses that occupy a viewing slot
SLOT_HOLDING_STATUSES = (BOOKING_STATUS_PENDING, BOOKING_STATUS_CONFIRMED)

CONTACT_PREFERENCES = [
    ('phone', 'Phone'),
    ('email', 'Email'),
    ('whatsapp', 'WhatsApp'),
]

# Booking payment statuses
BOOKING_PAYMENT_UNPAID = 'unpaid'
BOOKING_PAYMENT_PENDING = 'pending'
BOOKING_PAYMENT_PAID = 'paid'

BOOKING_PAYMENT_STATUSES = [
    (BOOKING_PAYMENT_UNPAID, 'Unpaid'),
    (BOOKING_PAYMENT_PENDING, 'Pending'),
    (BOOKING_PAYMENT_PAID, 'Paid'),
]

# Payment statuses
PAYMENT_STATUS_PENDING = 'pending'
PAYMENT_STATUS_SUCCESS = 'success'
PAYMENT_STATUS_FAILED = 'failed'

PAYMENT_STATUSES = [
    (PAYMENT_STATUS_PENDING, 'Pending'),
    (PAYMENT_STATUS_SUCCESS, 'Success'),
    (PAYMENT_STATUS_FAILED, 'Failed'),
]

PAYMENT_TYPE_PURCHASE = 'purchase'
PAYMENT_TYPE_RENTAL = 'rental'

PAYMENT_TYPES = [
    (PAYMENT_TYPE_PURCHASE, 'Purchase'),
    (PAYMENT_TYPE_RENTAL, 'Rental'),
]

PAYMENT_PROVIDER_PAYSTACK = 'paystack'

PAYMENT_PROVIDERS = [
    (PAYMENT_PROVIDER_PAYSTACK, 'Paystack'),
]

# Wishlist tags
WISHLIST_TAGS = ['favorite', 'considering', 'viewed', 'dream', 'investment']
