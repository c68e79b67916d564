"""
Integration tests for the ward nursing API.

These tests go through the HTTP layer with Django REST Framework's
APIClient: patient registration and visits, patient files, and the
prescription / lab report PDF endpoints including the error envelope.

To run the tests:

```
pytest -q nursing/tests
```
"""
import re
from datetime import date

from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from nursing.auth_views import issue_tokens
from nursing.models import LabReport, Medication, Nurse, Patient, PatientDocument, Prescription, StoredBlob
from nursing.services.blobstore import blob_store_from_settings
from nursing.services.patients import register_patient


def _body(resp) -> bytes:
    return b''.join(resp.streaming_content)


class WardAPITests(APITestCase):
    def setUp(self) -> None:
        self.nurse = Nurse.objects.create_user(
            'staff@ward.test', 'Ward@2024pass', name='Asha Staff', department='Pediatrics'
        )
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_tokens(self.nurse)['token']}")
        self.patient = register_patient(
            self.nurse, name='Ravi Kumar', age=42, gender='Male', contact='9876543210', today=date(2024, 3, 1)
        )

    # ------------------------------------------------------------------
    # Patients & visits
    # ------------------------------------------------------------------
    def test_register_assigns_daily_identifier(self):
        resp = self.client.post(reverse('patient_register'), {
            'name': '<b>Meera</b> Das', 'age': 35, 'gender': 'Female', 'contact': '9000000001',
            'address': 'Ward 4', 'medicalHistory': '<i>Asthma</i> <a href="http://x.test">since 2010</a>',
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        patient_id = resp.data['patientId']
        self.assertRegex(patient_id, r'^\d{8}\d{3,}$')
        self.assertEqual(resp.data['patient']['name'], 'Meera Das')
        self.assertEqual(Patient.objects.get(patient_id=patient_id).medical_history, 'Asthma since 2010')

    def test_register_requires_fields(self):
        resp = self.client.post(reverse('patient_register'), {'name': 'X'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(resp.data['ok'])
        self.assertEqual(resp.data['error']['code'], 'invalid')
        self.assertIn('age', resp.data['error']['message'])

    def test_list_detail_and_deactivate(self):
        resp = self.client.get(reverse('patient_list'))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([p['patientId'] for p in resp.data], ['20240301001'])

        resp = self.client.get(reverse('patient_detail', args=[self.patient.pk]))
        self.assertEqual(resp.data['patientId'], '20240301001')
        self.assertEqual(resp.data['visits'], [])
        self.assertNotIn('photo_handle', resp.data)

        resp = self.client.post(reverse('patient_deactivate', args=[self.patient.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.data['patient']['isActive'])
        resp = self.client.get(reverse('patient_list'), {'active': 'true'})
        self.assertEqual(resp.data, [])

    def test_unknown_patient_uses_error_envelope(self):
        resp = self.client.get(reverse('patient_detail', args=[9999]))
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data, {'ok': False, 'error': {'code': 'not_found', 'message': 'Patient not found'}})

    def test_add_visit_derives_bmi(self):
        resp = self.client.post(reverse('patient_add_visit'), {
            'patientId': self.patient.pk,
            'visit': {'weight': 70, 'height': 175, 'BP': '120/80', 'heartRate': 72, 'temperature': 36.8},
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['visit']['bmi'], '22.9')
        self.assertEqual(resp.data['visit']['bmiCategory'], 'Normal')
        self.assertEqual(resp.data['visit']['chiefComplaint'], 'Regular checkup')

        resp = self.client.get(reverse('patient_visits', args=[self.patient.pk]))
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]['BP'], '120/80')

    def test_add_visit_on_visit_route(self):
        resp = self.client.post('/api/visit/add', {
            'patientId': self.patient.pk,
            'visit': {'weight': 50, 'height': 170, 'bp': '110/70', 'heartRate': 80, 'temperature': 37.1},
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data['visit']['bmiCategory'], 'Underweight')
        self.assertEqual(self.patient.visits.count(), 1)

    # ------------------------------------------------------------------
    # Patient files
    # ------------------------------------------------------------------
    def test_document_upload_download_rename_delete(self):
        payload = b'%PDF-1.4 discharge summary'
        upload = SimpleUploadedFile('discharge.pdf', payload, content_type='application/pdf')
        resp = self.client.post(reverse('patient_upload_documents', args=[self.patient.pk]), {'anything': upload}, format='multipart')
        self.assertEqual(resp.status_code, 200)
        doc_id = resp.data['files'][0]['id']
        self.assertEqual(resp.data['files'][0]['uploadedBy'], self.nurse.nurse_id)

        resp = self.client.get(reverse('patient_documents', args=[self.patient.pk]))
        self.assertEqual([d['name'] for d in resp.data], ['discharge.pdf'])

        resp = self.client.get(reverse('patient_document', args=[self.patient.pk, doc_id]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp['Content-Type'], 'application/pdf')
        self.assertTrue(resp['Content-Disposition'].startswith('inline'))
        self.assertEqual(_body(resp), payload)

        resp = self.client.put(reverse('patient_document_rename', args=[self.patient.pk, doc_id]), {'newName': 'Discharge 2024.pdf'}, format='json')
        self.assertEqual(resp.data['document']['name'], 'Discharge 2024.pdf')
        resp = self.client.put(reverse('patient_document_rename', args=[self.patient.pk, doc_id]), {'newName': '  '}, format='json')
        self.assertEqual(resp.status_code, 400)

        resp = self.client.delete(reverse('patient_document', args=[self.patient.pk, doc_id]))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(PatientDocument.objects.exists())
        self.assertFalse(StoredBlob.objects.exists())

        resp = self.client.get(reverse('patient_document', args=[self.patient.pk, doc_id]))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['error']['message'], 'Document not found')

    def test_upload_rejects_unsupported_type(self):
        upload = SimpleUploadedFile('run.sh', b'echo hi', content_type='application/x-sh')
        resp = self.client.post(reverse('patient_upload_documents', args=[self.patient.pk]), {'file': upload}, format='multipart')
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(StoredBlob.objects.exists())

    def test_photo_replace_and_delete(self):
        first = SimpleUploadedFile('a.png', b'\x89PNG first', content_type='image/png')
        resp = self.client.post(reverse('patient_upload_profile', args=[self.patient.pk]), {'photo': first}, format='multipart')
        self.assertTrue(resp.data['patient']['hasPhoto'])
        self.assertFalse(resp.data['patient']['hasIdProof'])

        second = SimpleUploadedFile('b.png', b'\x89PNG second', content_type='image/png')
        self.client.post(reverse('patient_upload_profile', args=[self.patient.pk]), {'photo': second}, format='multipart')
        self.assertEqual(StoredBlob.objects.count(), 1)

        resp = self.client.get(reverse('patient_photo', args=[self.patient.pk]))
        self.assertEqual(resp['Content-Type'], 'image/png')
        self.assertEqual(_body(resp), b'\x89PNG second')

        resp = self.client.delete(reverse('patient_photo', args=[self.patient.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(StoredBlob.objects.exists())
        resp = self.client.get(reverse('patient_photo', args=[self.patient.pk]))
        self.assertEqual(resp.status_code, 404)
        resp = self.client.delete(reverse('patient_id_proof', args=[self.patient.pk]))
        self.assertEqual(resp.status_code, 404)

    # ------------------------------------------------------------------
    # Prescriptions & lab reports
    # ------------------------------------------------------------------
    def _prescription(self):
        rx = Prescription.objects.create(
            prescription_id='RX-1001', patient=self.patient, doctor_id='D-7', diagnosis='Viral fever', follow_up='5 days',
        )
        Medication.objects.create(prescription=rx, position=1, medicine='Paracetamol 650mg', dosage='1 tab TDS', duration='3 days')
        return rx

    def test_prescription_listing_filters(self):
        rx = self._prescription()
        Prescription.objects.create(prescription_id='RX-1002', patient=self.patient, doctor_id='D-7', diagnosis='x', status='draft')

        resp = self.client.get(reverse('prescription_list'), {'status': 'final'})
        self.assertEqual([p['prescriptionId'] for p in resp.data], ['RX-1001'])
        resp = self.client.get(reverse('patient_prescriptions', args=[self.patient.pk]))
        self.assertEqual(len(resp.data), 2)
        resp = self.client.get(reverse('prescription_detail', args=[rx.pk]))
        self.assertEqual(resp.data['medications'][0]['medicine'], 'Paracetamol 650mg')
        self.assertFalse(resp.data['hasPdf'])

    def test_prescription_pdf_is_rendered_once_and_downloadable(self):
        rx = self._prescription()
        resp = self.client.get(reverse('prescription_pdf', args=[rx.pk]))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.data['success'])
        self.assertRegex(resp.data['fileName'], r'^PRXN-20240301001-P001-\d{8}-\d+\.pdf$')
        locator = resp.data['pdfUrl']

        resp = self.client.get(reverse('prescription_pdf', args=[rx.pk]))
        self.assertEqual(resp.data['pdfUrl'], locator)

        resp = self.client.get(reverse('prescription_download', args=[rx.pk]))
        self.assertEqual(resp['Content-Type'], 'application/pdf')
        self.assertEqual(resp['Content-Disposition'], f'attachment; filename="{rx.__class__.objects.get(pk=rx.pk).pdf_filename}"')
        self.assertTrue(_body(resp).startswith(b'%PDF'))

    def test_missing_pdf_blob_needs_explicit_regenerate(self):
        rx = self._prescription()
        locator = self.client.get(reverse('prescription_pdf', args=[rx.pk])).data['pdfUrl']
        blob_store_from_settings().delete(locator)

        resp = self.client.get(reverse('prescription_download', args=[rx.pk]))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['error']['code'], 'document_missing')

        resp = self.client.get(reverse('prescription_pdf', args=[rx.pk]), {'regenerate': '1'})
        self.assertEqual(resp.status_code, 200)
        self.assertNotEqual(resp.data['pdfUrl'], locator)
        resp = self.client.get(reverse('prescription_download', args=[rx.pk]))
        self.assertEqual(resp.status_code, 200)

    def test_lab_report_pdf(self):
        report = LabReport.objects.create(
            report_id='LR-1', patient=self.patient, test_type='Lipid Profile', findings='LDL 162 mg/dL', status='completed',
        )
        LabReport.objects.create(report_id='LR-2', patient=self.patient, test_type='CBC', status='pending')

        resp = self.client.get(reverse('lab_report_list'), {'testType': 'lipid profile'})
        self.assertEqual([r['reportId'] for r in resp.data], ['LR-1'])

        resp = self.client.get(reverse('lab_report_pdf', args=[report.pk]))
        self.assertTrue(re.match(r'^LABREP-20240301001-L001-', resp.data['fileName']))
        resp = self.client.get(reverse('lab_report_download', args=[report.pk]))
        self.assertTrue(_body(resp).startswith(b'%PDF'))

        resp = self.client.get(reverse('lab_report_detail', args=[report.pk]))
        self.assertTrue(resp.data['hasPdf'])
        self.assertEqual(resp.data['sequenceLabel'], 'L001')

    def test_unknown_lab_report(self):
        resp = self.client.get(reverse('lab_report_pdf', args=[424242]))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data['error']['message'], 'Lab report not found')
