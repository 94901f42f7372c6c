"""
Identity and contact validation for client details.

South African ID numbers, phone numbers and passports, plus a couple of
generic checks used by the public client-details form.
"""
import re
from datetime import date

from django.utils import timezone

SA_PHONE_PATTERNS = [
    re.compile(r'^0\d{9}$'),
    re.compile(r'^\+27\d{9}$'),
    re.compile(r'^27\d{9}$'),
]
EMAIL_RE = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
PASSPORT_RE = re.compile(r'^[A-Z0-9]{6,9}$', re.IGNORECASE)
INTERNATIONAL_PHONE_RE = re.compile(r'^\+[1-9]\d{1,2}\d{4,14}$')


def _strip_id(value):
    return re.sub(r'[\s-]', '', value)


def _strip_phone(value):
    return re.sub(r'[\s\-()]', '', value)


def validate_sa_id(id_number):
    """
    Validate a South African ID number (YYMMDD SSSS C A Z).

    The date part must carry a plausible month and day; the last digit is a
    Luhn checksum over the whole number.
    """
    if not id_number or not isinstance(id_number, str):
        return False
    clean_id = _strip_id(id_number)
    if not re.fullmatch(r'\d{13}', clean_id):
        return False

    month = int(clean_id[2:4])
    day = int(clean_id[4:6])
    if month < 1 or month > 12:
        return False
    if day < 1 or day > 31:
        return False

    total = 0
    alternate = False
    for char in reversed(clean_id):
        digit = int(char)
        if alternate:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
        alternate = not alternate
    return total % 10 == 0


def extract_dob_from_sa_id(id_number):
    """Date of birth encoded in a valid SA ID number, or None"""
    if not validate_sa_id(id_number):
        return None
    clean_id = _strip_id(id_number)
    yy = int(clean_id[0:2])
    month = int(clean_id[2:4])
    day = int(clean_id[4:6])
    current_yy = timezone.now().year % 100
    year = 2000 + yy if yy <= current_yy else 1900 + yy
    try:
        return date(year, month, day)
    except ValueError:
        return None


def validate_sa_phone(phone):
    """Accepts +27821234567, 0821234567 and 27821234567 (spacing ignored)"""
    if not phone or not isinstance(phone, str):
        return False
    clean_phone = _strip_phone(phone)
    return any(pattern.match(clean_phone) for pattern in SA_PHONE_PATTERNS)


def format_sa_phone(phone):
    """Format as +27 82 123 4567; unrecognised input is returned unchanged"""
    if not phone:
        return ''
    clean_phone = _strip_phone(phone)
    normalized = clean_phone
    if clean_phone.startswith('0'):
        normalized = '27' + clean_phone[1:]
    elif clean_phone.startswith('+27'):
        normalized = clean_phone[1:]

    if len(normalized) == 11 and normalized.startswith('27'):
        return f"+{normalized[0:2]} {normalized[2:4]} {normalized[4:7]} {normalized[7:]}"
    return phone


def validate_email(email):
    if not email or not isinstance(email, str):
        return False
    return bool(EMAIL_RE.match(email))


def validate_passport(passport_number):
    if not passport_number or not isinstance(passport_number, str):
        return False
    return bool(PASSPORT_RE.match(_strip_id(passport_number)))


def validate_international_phone(phone):
    """E.164: +<1-3 digit country code><4-14 digits>"""
    if not phone or not isinstance(phone, str):
        return False
    return bool(INTERNATIONAL_PHONE_RE.match(_strip_phone(phone)))


def validate_client_identity(id_number=None, passport_number=None):
    """
    A client needs either an SA ID or a passport. The ID is checked when
    both are supplied.

    Returns (is_valid, error_message)
    """
    if not id_number and not passport_number:
        return False, 'Please provide either a South African ID number or passport number'
    if id_number:
        if not validate_sa_id(id_number):
            return False, 'Invalid South African ID number'
        return True, None
    if not validate_passport(passport_number):
        return False, 'Invalid passport number (must be 6-9 alphanumeric characters)'
    return True, None


def validate_phone_number(phone):
    """SA format first, then international. Returns (is_valid, error_message)"""
    if not phone:
        return False, 'Phone number is required'
    if validate_sa_phone(phone) or validate_international_phone(phone):
        return True, None
    return False, 'Invalid phone number (use a South African number or +country code format)'
