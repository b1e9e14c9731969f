import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class DomainError(APIException):
    """Base class for business rule violations reported as 400."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'invalid request'
    default_code = 'domain_error'


class InvalidTransition(DomainError):
    default_detail = 'status transition not allowed'
    default_code = 'invalid_transition'


class InsufficientStock(DomainError):
    default_detail = 'insufficient stock'
    default_code = 'insufficient_stock'


class BedUnavailable(DomainError):
    default_detail = 'bed is not available'
    default_code = 'bed_unavailable'


class DuplicateRecord(DomainError):
    default_detail = 'record already exists'
    default_code = 'duplicate'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled error in %s', getattr(view, '__name__', view), exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
