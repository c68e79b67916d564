"""
Error taxonomy and the project-wide DRF exception handler.

Every failure leaves the API as ``{"ok": false, "error": {"code", "message"}}``
so callers can tell "not found" apart from server-side storage problems.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class RecordNotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Record not found'
    default_code = 'not_found'


class BlobNotFound(RecordNotFound):
    default_detail = 'File not found'
    default_code = 'blob_not_found'


class InvalidHandle(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid file ID'
    default_code = 'invalid_handle'


class StorageWriteError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Could not write file to storage'
    default_code = 'storage_write_error'


class StorageReadError(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Could not read file from storage'
    default_code = 'storage_read_error'


class DocumentMissing(APIException):
    """A record points at a rendered document whose blob no longer exists."""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'PDF file not found on server'
    default_code = 'document_missing'


class DocumentRenderError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Could not render document'
    default_code = 'render_error'


def _error_code(exc, data) -> str:
    code = getattr(exc, 'default_code', None) or 'api_error'
    if isinstance(data, dict) and 'detail' not in data:
        # field validation errors
        return 'invalid'
    return code


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error in %s', context.get('view').__class__.__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    if isinstance(resp.data, dict):
        message = resp.data.get('detail') or resp.data
    else:
        message = resp.data
    if resp.status_code >= 500:
        logger.error('%s: %s', exc.__class__.__name__, message)
    headers = {h: resp[h] for h in ('WWW-Authenticate', 'Retry-After') if resp.has_header(h)}
    return Response(
        {'ok': False, 'error': {'code': _error_code(exc, resp.data), 'message': message}},
        status=resp.status_code,
        headers=headers or None,
    )
