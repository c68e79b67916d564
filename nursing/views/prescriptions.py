"""
Read-only prescription endpoints plus their rendered PDF.

Prescriptions are written by the doctor system; nurses list them, read
them and download the PDF, which is rendered on first request.
"""
from rest_framework.decorators import api_view
from rest_framework.response import Response

from nursing.exceptions import RecordNotFound
from nursing.models import Prescription
from nursing.serializers.clinical import PrescriptionSerializer
from nursing.services.patients import get_patient
from nursing.views.rendered import download_response, generate_response


def _prescriptions():
    return Prescription.objects.prefetch_related('medications').order_by('-date', '-id')


def _get_prescription(pk) -> Prescription:
    obj = _prescriptions().filter(pk=pk).first()
    if obj is None:
        raise RecordNotFound('Prescription not found')
    return obj


@api_view(['GET'])
def list_prescriptions(request):
    qs = _prescriptions()
    status = request.query_params.get('status')
    administration = request.query_params.get('administrationStatus')
    if status:
        qs = qs.filter(status=status)
    if administration:
        qs = qs.filter(administration_status=administration)
    return Response(PrescriptionSerializer(qs, many=True).data)


@api_view(['GET'])
def patient_prescriptions(request, patient_pk: int):
    patient = get_patient(patient_pk)
    return Response(PrescriptionSerializer(_prescriptions().filter(patient=patient), many=True).data)


@api_view(['GET'])
def prescription_detail(request, pk: int):
    return Response(PrescriptionSerializer(_get_prescription(pk)).data)


@api_view(['GET'])
def prescription_pdf(request, pk: int):
    return generate_response(request, _get_prescription(pk), 'Prescription')


@api_view(['GET'])
def prescription_download(request, pk: int):
    return download_response(request, _get_prescription(pk))
