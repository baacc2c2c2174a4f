"""
Helper utilities
"""
import secrets
import time


def generate_payment_reference(prefix: str = 'ESTATE') -> str:
    """
    Build a unique payment reference: PREFIX_<epoch millis>_<8 hex chars>
    """
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"
