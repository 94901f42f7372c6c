"""Selling price suggestions from past sales"""
from decimal import Decimal
from statistics import median

from gearops.inspections.pricing import round_rand
from .models import Equipment

MIN_PRODUCT_SAMPLES = 3


def _confidence(sample_size):
    if sample_size >= 5:
        return 'high'
    if sample_size >= 2:
        return 'medium'
    return 'low'


def _empty():
    return {
        'recommended_price': 0,
        'average_price': 0,
        'median_price': 0,
        'min_price': 0,
        'max_price': 0,
        'sample_size': 0,
        'confidence': 'low',
        'prices_by_condition': {},
    }


def get_price_recommendation(product_id=None, brand='', model='', condition=None):
    """
    Recommend a selling price from SOLD equipment.

    Sales converted from the same catalog product come first; when there are
    fewer than three, sales with a matching brand and model are added.
    """
    sold = Equipment.objects.filter(status=Equipment.STATUS_SOLD)
    samples = []
    if product_id:
        samples = list(sold.filter(source_verified_item__product_id=product_id))

    if len(samples) < MIN_PRODUCT_SAMPLES and (brand or model):
        seen = {e.id for e in samples}
        fuzzy = sold
        if brand:
            fuzzy = fuzzy.filter(brand__icontains=brand)
        if model:
            fuzzy = fuzzy.filter(model__icontains=model)
        samples += [e for e in fuzzy if e.id not in seen]

    samples = [e for e in samples if e.selling_price is not None and e.selling_price > 0]
    if not samples:
        return _empty()

    prices = sorted(Decimal(e.selling_price) for e in samples)
    average = round_rand(sum(prices) / len(prices))

    by_condition = {}
    for e in samples:
        by_condition.setdefault(e.condition, []).append(Decimal(e.selling_price))
    prices_by_condition = {
        cond: int(round_rand(sum(values) / len(values))) for cond, values in by_condition.items()
    }

    return {
        'recommended_price': prices_by_condition.get(condition) or int(average),
        'average_price': int(average),
        'median_price': int(round_rand(median(prices))),
        'min_price': int(round_rand(prices[0])),
        'max_price': int(round_rand(prices[-1])),
        'sample_size': len(prices),
        'confidence': _confidence(len(prices)),
        'prices_by_condition': prices_by_condition,
    }
