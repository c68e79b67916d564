from datetime import date

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from nursing.auth_views import issue_tokens
from nursing.models import LabReport, Medication, Nurse, Prescription
from nursing.services.blobstore import BlobStore
from nursing.services.patients import register_patient

PASSWORD = 'Ward@2024pass'


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def nurse(db):
    return Nurse.objects.create_user('staff@ward.test', PASSWORD, name='Asha Staff', department='Surgery')


@pytest.fixture
def head_nurse(db):
    return Nurse.objects.create_user('head@ward.test', PASSWORD, name='Mira Head', department='Surgery', role=Nurse.ROLE_HEAD)


def client_for(nurse) -> APIClient:
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_tokens(nurse)['token']}")
    return client


@pytest.fixture
def api(nurse):
    return client_for(nurse)


@pytest.fixture
def store(db):
    return BlobStore(bucket='uploads', chunk_size=1024)


@pytest.fixture
def patient(nurse):
    return register_patient(
        nurse, name='Ravi Kumar', age=42, gender='Male', contact='9876543210',
        emergency_contact='9876500000', address='12 Lake Road', today=date(2024, 3, 1),
    )


@pytest.fixture
def prescription(patient):
    rx = Prescription.objects.create(
        prescription_id='RX-1001', patient=patient, doctor_id='D-7',
        diagnosis='Community acquired pneumonia', clinical_notes='Crackles right base.',
        special_instructions='Complete the full course.', follow_up='7 days',
    )
    Medication.objects.create(prescription=rx, position=1, medicine='Amoxicillin 500mg', dosage='1 tab TDS', duration='7 days', notes='After food')
    Medication.objects.create(prescription=rx, position=2, medicine='Paracetamol 650mg', dosage='1 tab SOS', duration='3 days')
    return rx


@pytest.fixture
def lab_report(patient):
    return LabReport.objects.create(
        report_id='LR-2001', patient=patient, doctor_id='D-7', test_type='CBC', name='Complete Blood Count',
        findings='Hb 13.2 g/dL, WBC 11,200/uL', normal_range='WBC 4,000-11,000/uL',
        interpretation='Mild leukocytosis', status='completed',
    )


@pytest.fixture
def head_api(head_nurse):
    return client_for(head_nurse)
