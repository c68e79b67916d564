"""
Patient registration, listing and visit endpoints.

Every endpoint requires an authenticated, active nurse (the project wide
default permission). Patients are never deleted, only deactivated.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework.decorators import api_view
from rest_framework.response import Response

from nursing.serializers.patient import (
    AddVisitSerializer,
    PatientDetailSerializer,
    PatientListQuerySerializer,
    PatientRegisterSerializer,
    PatientSerializer,
    VisitSerializer,
)
from nursing.services.patients import add_visit, deactivate_patient, get_patient, register_patient
from nursing.models import Patient


@api_view(['POST'])
def patient_register(request):
    s = PatientRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    patient = register_patient(
        request.user,
        name=vd['name'],
        age=vd['age'],
        gender=vd['gender'],
        contact=vd['contact'],
        emergency_contact=vd.get('emergencyContact', ''),
        address=vd.get('address', ''),
        medical_history=vd.get('medicalHistory', ''),
    )
    return Response({
        'ok': True,
        'message': 'Patient registered successfully',
        'patientId': patient.patient_id,
        'patient': PatientSerializer(patient).data,
    }, status=201)


@api_view(['GET'])
def list_patients(request):
    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    qs = Patient.objects.order_by('-created_at', '-id')
    if vd.get('active') is not None:
        qs = qs.filter(is_active=vd['active'])
    if vd.get('q'):
        qs = qs.filter(Q(name__icontains=vd['q']) | Q(patient_id__startswith=vd['q']) | Q(contact__icontains=vd['q']))
    page = vd.get('page') or 1
    page_size = vd.get('pageSize') or 0
    if page_size:
        start = (page-1)*page_size
        qs = qs[start:start+page_size]
    return Response(PatientSerializer(qs, many=True).data)


@api_view(['GET'])
def patient_detail(request, pk: int):
    patient = get_patient(pk)
    return Response(PatientDetailSerializer(patient).data)


@api_view(['POST'])
def patient_deactivate(request, pk: int):
    patient = deactivate_patient(request.user, get_patient(pk))
    return Response({'ok': True, 'patient': PatientSerializer(patient).data})


@api_view(['POST'])
def patient_add_visit(request):
    s = AddVisitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = get_patient(s.validated_data['patientId'])
    v = s.validated_data['visit']
    visit = add_visit(
        patient,
        weight=v['weight'],
        height=v['height'],
        blood_pressure=v['BP'],
        heart_rate=v['heartRate'],
        temperature=v['temperature'],
        chief_complaint=v.get('chiefComplaint'),
        notes=v.get('notes', ''),
    )
    return Response({'ok': True, 'message': 'Visit added successfully', 'visit': VisitSerializer(visit).data}, status=201)


@api_view(['GET'])
def patient_visits(request, pk: int):
    patient = get_patient(pk)
    return Response(VisitSerializer(patient.visits.all(), many=True).data)
