"""
SKU helpers for equipment
"""
import random

from django.utils import timezone

from .models import Equipment

BRAND_PREFIXES = [
    ('canon', 'CA'),
    ('nikon', 'NI'),
    ('sony', 'SO'),
    ('fujifilm', 'FU'),
    ('fuji', 'FU'),
    ('leica', 'LE'),
    ('sigma', 'SI'),
    ('tamron', 'TA'),
    ('panasonic', 'PA'),
    ('olympus', 'OL'),
    ('hasselblad', 'HA'),
    ('pentax', 'PE'),
    ('dji', 'DJ'),
    ('gopro', 'GP'),
    ('zeiss', 'ZE'),
    ('godox', 'GO'),
]
GENERIC_PREFIX = 'GE'
MAX_ATTEMPTS = 10


def get_brand_prefix(brand):
    """Two-letter prefix for a brand (case-insensitive substring match), GE otherwise"""
    if not brand:
        return GENERIC_PREFIX
    brand_lower = brand.lower()
    for name, prefix in BRAND_PREFIXES:
        if name in brand_lower:
            return prefix
    return GENERIC_PREFIX


def _random_suffix():
    return str(random.randint(1000, 9999))


def generate_sku(brand, serial_number=None):
    """
    Generate a unique SKU: PREFIX-XXXX

    The suffix is the last four characters of the serial number when there is
    one, otherwise a random 4-digit number. Collisions retry with random
    suffixes, then fall back to the last four digits of the current timestamp.
    """
    prefix = get_brand_prefix(brand)
    serial = (serial_number or '').strip()
    suffix = serial[-4:].upper() if len(serial) >= 4 else _random_suffix()
    sku = f"{prefix}-{suffix}"

    attempts = 0
    while Equipment.objects.filter(sku=sku).exists():
        attempts += 1
        if attempts > MAX_ATTEMPTS:
            sku = f"{prefix}-{str(int(timezone.now().timestamp() * 1000))[-4:]}"
            break
        sku = f"{prefix}-{_random_suffix()}"
    return sku


def validate_sku(sku, exclude_id=None):
    """True when the SKU is not used by any other equipment"""
    queryset = Equipment.objects.filter(sku=sku)
    if exclude_id is not None:
        queryset = queryset.exclude(pk=exclude_id)
    return not queryset.exists()
