"""Shared helpers: activity logging, request metadata, pagination"""
import logging

from django.core.paginator import Paginator
from rest_framework import status
from rest_framework.response import Response

from .models import ActivityLog

logger = logging.getLogger(__name__)


class WorkflowError(Exception):
    """A requested state transition is not allowed right now"""

    def __init__(self, message, status_code=status.HTTP_400_BAD_REQUEST, extra=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.extra = extra or {}

    def to_response(self):
        return Response({'error': self.message, **self.extra}, status=self.status_code)


def error_response(message, status_code=status.HTTP_400_BAD_REQUEST, **extra):
    return Response({'error': message, **extra}, status=status_code)


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def create_activity_log(request=None, action=None, entity_type=None, entity_id=None,
                        details=None, user=None):
    """
    Create an activity log entry

    Args:
        request: request object (for user and IP) - optional if user is provided
        action: one of ActivityLog.ACTION_CHOICES
        entity_type: name of the record type acted upon (e.g. EQUIPMENT)
        entity_id: primary key of the record
        details: dictionary with extra context
        user: optional user override (defaults to request.user)

    Never raises; a failed write is logged and the caller carries on.
    """
    try:
        log_user = user
        if log_user is None and request is not None and hasattr(request, 'user'):
            log_user = request.user

        if not action or not entity_type or entity_id is None:
            logger.warning(
                f"Activity log skipped: missing required fields "
                f"(action={action}, entity_type={entity_type}, entity_id={entity_id})"
            )
            return None

        return ActivityLog.objects.create(
            user=log_user if log_user is not None and log_user.is_authenticated else None,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            details=details or {},
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        logger.error(f"Failed to create activity log: {str(e)}")
        return None


def paginate(request, queryset, serializer_class, default_limit=20, page_param='page',
             limit_param='limit', context=None):
    """Paginate a queryset into the standard list envelope"""
    try:
        page = max(int(request.query_params.get(page_param, 1)), 1)
    except (TypeError, ValueError):
        page = 1
    try:
        limit = max(int(request.query_params.get(limit_param, default_limit)), 1)
    except (TypeError, ValueError):
        limit = default_limit

    paginator = Paginator(queryset, limit)
    page_obj = paginator.get_page(page)
    serializer = serializer_class(page_obj, many=True, context=context or {'request': request})
    return Response({
        'results': serializer.data,
        'count': paginator.count,
        'next': page_obj.next_page_number() if page_obj.has_next() else None,
        'previous': page_obj.previous_page_number() if page_obj.has_previous() else None,
        'page': page_obj.number,
        'page_size': limit,
        'total_pages': paginator.num_pages,
    })


def check_admin_credentials(admin_id, admin_password):
    """
    Confirm that admin_id names an ADMIN user whose password matches.
    Returns the user, or None.
    """
    from django.contrib.auth import get_user_model
    from .permissions import is_admin_user

    if not admin_id or not admin_password:
        return None
    User = get_user_model()
    try:
        admin = User.objects.get(pk=admin_id, is_active=True)
    except (User.DoesNotExist, ValueError, TypeError):
        return None
    if not is_admin_user(admin) or not admin.check_password(admin_password):
        return None
    return admin
