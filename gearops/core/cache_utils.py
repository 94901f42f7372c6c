"""
Caching utilities for expensive aggregate queries.
Backed by Redis (django-redis) in deployment, local memory otherwise.
"""
from django.core.cache import cache
from functools import wraps
import hashlib
import logging

logger = logging.getLogger(__name__)

# Cache TTLs (in seconds)
DASHBOARD_STATS_CACHE_TTL = 300  # 5 minutes
NOTIFICATION_COUNTS_CACHE_TTL = 30

DASHBOARD_CACHE_PREFIXES = ('dashboard_stats', 'notification_counts')


def make_cache_key(prefix, *args, **kwargs):
    """Generate a unique cache key from arguments"""
    key_data = f"{prefix}:{args}:{sorted(kwargs.items())}"
    key_hash = hashlib.md5(key_data.encode()).hexdigest()
    return f"{prefix}:{key_hash}"


def cached_query(cache_ttl=60, key_prefix="query"):
    """
    Decorator to cache expensive queries

    Usage:
        @cached_query(cache_ttl=120, key_prefix="dashboard_stats")
        def get_expensive_data():
            return data
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            cache_key = make_cache_key(key_prefix, *args, **kwargs)

            cached_data = cache.get(cache_key)
            if cached_data is not None:
                logger.debug(f"Cache HIT for {key_prefix}: {cache_key}")
                return cached_data

            logger.debug(f"Cache MISS for {key_prefix}: {cache_key}")
            result = func(*args, **kwargs)
            cache.set(cache_key, result, cache_ttl)
            return result
        return wrapper
    return decorator


def invalidate_dashboard_cache():
    """Drop cached dashboard stats and notification counts"""
    try:
        cache.delete_many([make_cache_key(prefix) for prefix in DASHBOARD_CACHE_PREFIXES])
    except Exception as e:
        logger.warning(f"Could not invalidate dashboard cache: {str(e)}")
