"""
HMAC-SHA256 signatures for inbound webhooks.

The bot sends `X-Webhook-Signature: sha256=<hex>` computed over the raw
request body with the shared WEBHOOK_SECRET.
"""
import hashlib
import hmac

SIGNATURE_PREFIX = 'sha256='


class InvalidSignature(Exception):
    def __init__(self, result):
        super().__init__('Invalid webhook signature')
        self.result = result


class SignatureCheck:
    """Outcome of a verification, kept for the event log"""

    def __init__(self, valid, provided, computed):
        self.valid = valid
        self.provided = provided
        self.computed = computed

    def __bool__(self):
        return self.valid

    def __repr__(self):
        return f"SignatureCheck(valid={self.valid})"


def _as_bytes(value):
    if isinstance(value, str):
        return value.encode('utf-8')
    return value


def compute_signature(body, secret):
    digest = hmac.new(_as_bytes(secret), _as_bytes(body), hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body, signature_header, secret):
    """Constant-time comparison; never raises on malformed headers"""
    computed = compute_signature(body, secret)
    if not signature_header:
        return SignatureCheck(False, None, computed)

    provided_hex = signature_header
    if provided_hex.startswith(SIGNATURE_PREFIX):
        provided_hex = provided_hex[len(SIGNATURE_PREFIX):]
    computed_hex = computed[len(SIGNATURE_PREFIX):]

    if len(provided_hex) != len(computed_hex):
        return SignatureCheck(False, signature_header, computed)
    try:
        valid = hmac.compare_digest(provided_hex.encode('ascii'), computed_hex.encode('ascii'))
    except UnicodeEncodeError:
        valid = False
    return SignatureCheck(valid, signature_header, computed)


def require_valid_signature(body, signature_header, secret):
    result = verify_signature(body, signature_header, secret)
    if not result.valid:
        raise InvalidSignature(result)
    return result
