"""Random tokens for public (unauthenticated) links"""
import secrets
from datetime import timedelta

from django.conf import settings
from django.utils import timezone


def generate_token():
    """64 hex characters (32 random bytes)"""
    return secrets.token_hex(32)


def token_expiry(days=None):
    if days is None:
        days = settings.QUOTE_TOKEN_TTL_DAYS
    return timezone.now() + timedelta(days=days)
