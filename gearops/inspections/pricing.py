"""
Inspection pricing.

The top of a product's buy/consign band is scaled by the verified condition,
then missing-accessory penalties are subtracted. Prices are whole rand.
"""
from decimal import Decimal, ROUND_HALF_UP

CONDITION_MULTIPLIERS = {
    'LIKE_NEW': Decimal('1.00'),
    'EXCELLENT': Decimal('0.95'),
    'VERY_GOOD': Decimal('0.90'),
    'GOOD': Decimal('0.82'),
    'WORN': Decimal('0.70'),
}

ZERO = Decimal('0')


def round_rand(value):
    """Round half up to a whole rand"""
    return Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def _to_decimal(value):
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_pricing(base_buy_min, base_buy_max, base_consign_min, base_consign_max,
                    condition, accessory_penalty=ZERO):
    """
    Returns a dict with condition_multiplier, computed_buy_price,
    computed_consign_price, accessory_penalty, total_penalty,
    final_buy_price and final_consign_price.

    Raises KeyError for an unknown condition.
    """
    multiplier = CONDITION_MULTIPLIERS[condition]
    penalty = _to_decimal(accessory_penalty)

    computed_buy = round_rand(_to_decimal(base_buy_max) * multiplier)
    computed_consign = round_rand(_to_decimal(base_consign_max) * multiplier)

    return {
        'base_buy_min': _to_decimal(base_buy_min),
        'base_buy_max': _to_decimal(base_buy_max),
        'base_consign_min': _to_decimal(base_consign_min),
        'base_consign_max': _to_decimal(base_consign_max),
        'condition_multiplier': multiplier,
        'computed_buy_price': computed_buy,
        'computed_consign_price': computed_consign,
        'accessory_penalty': penalty,
        'total_penalty': penalty,
        'final_buy_price': max(ZERO, computed_buy - penalty),
        'final_consign_price': max(ZERO, computed_consign - penalty),
    }


def calculate_accessory_penalty(accessories, templates):
    """
    Sum the template penalty of every accessory that is not present.

    accessories: iterable of (accessory_name, is_present) pairs or objects
    with those attributes; templates: AccessoryTemplate rows for the product.
    """
    penalties = {t.accessory_name.lower(): _to_decimal(t.penalty_amount) for t in templates}
    total = ZERO
    for accessory in accessories:
        if isinstance(accessory, dict):
            name, present = accessory.get('accessory_name', ''), accessory.get('is_present', True)
        else:
            name, present = accessory.accessory_name, accessory.is_present
        if not present:
            total += penalties.get((name or '').lower(), ZERO)
    return total


def get_final_display_price(auto_buy_price, auto_consign_price, override_buy_price=None,
                            override_consign_price=None):
    """An override wins over the computed price whenever it is set (zero included)"""
    return {
        'final_buy_price': override_buy_price if override_buy_price is not None else auto_buy_price,
        'final_consign_price': override_consign_price if override_consign_price is not None else auto_consign_price,
        'is_buy_overridden': override_buy_price is not None,
        'is_consign_overridden': override_consign_price is not None,
    }


def format_price(amount):
    """R12 345 style; '-' when there is no amount"""
    if amount is None:
        return '-'
    rounded = int(round_rand(_to_decimal(amount)))
    return 'R' + f'{rounded:,}'.replace(',', ' ')
