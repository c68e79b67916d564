"""
Patient file endpoints: uploaded documents, photo and ID proof.

Bytes are kept in the blob store; these views only move them between
the request/response and :mod:`nursing.services.patients`.
"""
from __future__ import annotations

from django.http import StreamingHttpResponse
from django.utils.http import content_disposition_header
from rest_framework.decorators import api_view
from rest_framework.response import Response

from nursing.serializers.patient import DocumentSerializer, PatientSerializer, RenameDocumentSerializer
from nursing.services.blobstore import BlobReader, blob_store_from_settings
from nursing.services import patients as svc


def stream_blob(reader: BlobReader, content_type: str = '', disposition: str | None = None) -> StreamingHttpResponse:
    resp = StreamingHttpResponse(iter(reader), content_type=content_type or reader.content_type or 'application/octet-stream')
    resp['Content-Length'] = str(reader.length)
    resp['Cache-Control'] = 'no-cache'
    resp['Pragma'] = 'no-cache'
    if disposition:
        resp['Content-Disposition'] = disposition
    return resp


# ---------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------
@api_view(['POST'])
def upload_documents(request, pk: int):
    patient = svc.get_patient(pk)
    files = [f for _, items in request.FILES.lists() for f in items]
    docs = svc.attach_documents(request.user, patient, files, blob_store_from_settings())
    return Response({
        'ok': True,
        'message': 'Files uploaded successfully',
        'files': DocumentSerializer(docs, many=True).data,
    })


@api_view(['GET'])
def list_documents(request, pk: int):
    patient = svc.get_patient(pk)
    return Response(DocumentSerializer(patient.documents.select_related('uploaded_by'), many=True).data)


@api_view(['GET', 'DELETE'])
def document_detail(request, pk: int, doc_pk: int):
    patient = svc.get_patient(pk)
    doc = svc.get_document(patient, doc_pk)
    store = blob_store_from_settings()
    if request.method == 'DELETE':
        svc.delete_document(request.user, doc, store)
        return Response({'ok': True, 'message': 'Document deleted successfully'})
    reader = svc.open_document(doc, store)
    return stream_blob(reader, doc.content_type, content_disposition_header(False, doc.name))


@api_view(['PUT'])
def rename_document(request, pk: int, doc_pk: int):
    patient = svc.get_patient(pk)
    doc = svc.get_document(patient, doc_pk)
    s = RenameDocumentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    doc = svc.rename_document(doc, s.validated_data['newName'])
    return Response({'ok': True, 'message': 'Document renamed successfully', 'document': DocumentSerializer(doc).data})


# ---------------------------------------------------------------------
# Photo / ID proof
# ---------------------------------------------------------------------
@api_view(['POST'])
def upload_profile(request, pk: int):
    patient = svc.get_patient(pk)
    files = {slot: request.FILES.get(slot) for slot in svc.PROFILE_SLOTS}
    patient = svc.upload_profile_files(request.user, patient, blob_store_from_settings(), files)
    return Response({'ok': True, 'message': 'Files uploaded successfully', 'patient': PatientSerializer(patient).data})


def _profile_file(request, pk: int, slot: str):
    patient = svc.get_patient(pk)
    store = blob_store_from_settings()
    if request.method == 'DELETE':
        svc.delete_profile_file(request.user, patient, slot, store)
        return Response({'ok': True, 'message': f'Patient {svc.PROFILE_LABELS[slot].lower()} deleted successfully'})
    reader, content_type = svc.open_profile_file(patient, slot, store)
    return stream_blob(reader, content_type)


@api_view(['GET', 'DELETE'])
def patient_photo(request, pk: int):
    return _profile_file(request, pk, 'photo')


@api_view(['GET', 'DELETE'])
def patient_id_proof(request, pk: int):
    return _profile_file(request, pk, 'idProof')
