"""
Shared handling of the ``/pdf`` and ``/get-pdf`` endpoints.
"""
from django.utils.http import content_disposition_header
from rest_framework.response import Response

from nursing.services.blobstore import blob_store_from_settings
from nursing.services.documents import fetch, generate
from nursing.views.attachments import stream_blob

TRUTHY = {'1', 'true', 'yes', 'on'}


def wants_regenerate(request) -> bool:
    return (request.query_params.get('regenerate') or '').strip().lower() in TRUTHY


def generate_response(request, record, label: str) -> Response:
    regenerate = wants_regenerate(request)
    doc = generate(record, blob_store_from_settings(), regenerate=regenerate, nurse=request.user)
    return Response({
        'success': True,
        'message': f'{label} PDF generated successfully' if regenerate else f'{label} PDF ready',
        'pdfUrl': doc.locator,
        'fileName': doc.filename,
    })


def download_response(request, record):
    doc, reader = fetch(record, blob_store_from_settings(), nurse=request.user)
    return stream_blob(reader, 'application/pdf', content_disposition_header(True, doc.filename))
