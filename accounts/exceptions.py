import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.views import exception_handler

from .utils import error_response

logger = logging.getLogger(__name__)


class BloodBankError(exceptions.APIException):
    """Base for domain errors; default_code is the machine-readable kind."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request could not be processed'
    default_code = 'error'


class NotFound(BloodBankError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found'
    default_code = 'not_found'


class Forbidden(BloodBankError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Access denied'
    default_code = 'forbidden'


class InvalidInput(BloodBankError):
    default_detail = 'Invalid input'
    default_code = 'invalid_input'


class IneligibleDonor(BloodBankError):
    default_detail = 'You are not eligible to donate yet'
    default_code = 'ineligible_donor'


class InvalidState(BloodBankError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Operation not allowed in the current state'
    default_code = 'invalid_state'


class InsufficientStock(BloodBankError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Insufficient inventory'
    default_code = 'insufficient_stock'


# DRF's own exceptions mapped onto the same kinds
_DRF_CODES = {
    exceptions.ValidationError: 'invalid_input',
    exceptions.ParseError: 'invalid_input',
    exceptions.PermissionDenied: 'forbidden',
    exceptions.NotFound: 'not_found',
    exceptions.NotAuthenticated: 'not_authenticated',
    exceptions.AuthenticationFailed: 'not_authenticated',
    Http404: 'not_found',
    DjangoPermissionDenied: 'forbidden',
}


def _kind(exc):
    if isinstance(exc, BloodBankError):
        return exc.default_code
    for exc_class, code in _DRF_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return getattr(exc, 'default_code', 'error')


def api_exception_handler(exc, context):
    """Render every handled exception in the {"status": "error"} envelope."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    kind = _kind(exc)
    if isinstance(exc, exceptions.ValidationError):
        message = 'Invalid data provided'
        errors = response.data
    else:
        detail = response.data.get('detail') if isinstance(response.data, dict) else response.data
        message = str(detail) if detail is not None else 'Request failed'
        errors = None

    if response.status_code >= 500:
        logger.error('API error %s: %s', kind, message)
    else:
        logger.info('API error %s (%s): %s', kind, response.status_code, message)

    payload = error_response(message, code=kind, errors=errors, status_code=response.status_code)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if response.has_header(header):
            payload[header] = response[header]
    return payload
