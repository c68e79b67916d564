from rest_framework.decorators import api_view
from rest_framework.response import Response

from nursing.exceptions import RecordNotFound
from nursing.models import LabReport
from nursing.serializers.clinical import LabReportSerializer
from nursing.services.patients import get_patient
from nursing.views.rendered import download_response, generate_response


def _get_report(pk) -> LabReport:
    obj = LabReport.objects.filter(pk=pk).first()
    if obj is None:
        raise RecordNotFound('Lab report not found')
    return obj


@api_view(['GET'])
def list_lab_reports(request):
    qs = LabReport.objects.order_by('-date', '-id')
    status = request.query_params.get('status')
    test_type = request.query_params.get('testType')
    if status:
        qs = qs.filter(status=status)
    if test_type:
        qs = qs.filter(test_type__iexact=test_type)
    return Response(LabReportSerializer(qs, many=True).data)


@api_view(['GET'])
def patient_lab_reports(request, patient_pk: int):
    patient = get_patient(patient_pk)
    qs = LabReport.objects.filter(patient=patient).order_by('-date', '-id')
    return Response(LabReportSerializer(qs, many=True).data)


@api_view(['GET'])
def lab_report_detail(request, pk: int):
    return Response(LabReportSerializer(_get_report(pk)).data)


@api_view(['GET'])
def lab_report_pdf(request, pk: int):
    return generate_response(request, _get_report(pk), 'Lab report')


@api_view(['GET'])
def lab_report_download(request, pk: int):
    return download_response(request, _get_report(pk))
