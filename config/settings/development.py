"""
Development settings
"""
from .base import *

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '*']

# Print emails to the console unless an SMTP backend is configured explicitly
EMAIL_BACKEND = env('EMAIL_BACKEND', default='django.core.mail.backends.console.EmailBackend')

SECURE_SSL_REDIRECT = False

CORS_ALLOW_ALL_ORIGINS = True

# Paystack sandbox rejects large amounts
PAYMENTS_TEST_MODE = env.bool('PAYMENTS_TEST_MODE', default=True)

LOGGING['loggers']['apps'] = {
    'handlers': ['console'],
    'level': 'DEBUG',
    'propagate': False,
}
