from datetime import date, datetime, timezone as dt_timezone

import pytest

from nursing.models import LabReport, Nurse, Patient, Prescription, SequenceCounter
from nursing.services import sequences
from nursing.services.patients import register_patient

pytestmark = pytest.mark.django_db


def _register(name, day):
    return register_patient(None, name=name, age=30, gender='Female', contact='555', today=day)


def test_same_day_serials_start_at_one_and_increase():
    day = date(2024, 3, 1)
    first = _register('A', day)
    second = _register('B', day)
    assert first.patient_id == '20240301001'
    assert second.patient_id == '20240301002'
    assert _register('C', date(2024, 3, 2)).patient_id == '20240302001'


def test_counter_is_seeded_from_existing_identifiers():
    Patient.objects.create(patient_id='20240301007', name='Legacy', age=50, gender='Male', contact='1')
    Patient.objects.create(patient_id='20240301003', name='Legacy 2', age=50, gender='Male', contact='2')
    assert sequences.next_patient_identifier(date(2024, 3, 1)) == '20240301008'
    assert SequenceCounter.objects.get(scope='patient:20240301').value == 8


def test_serials_past_999_keep_growing():
    SequenceCounter.objects.create(scope='patient:20240301', value=999)
    assert sequences.next_patient_identifier(date(2024, 3, 1)) == '202403011000'


def test_advance_retries_after_losing_a_race(monkeypatch):
    SequenceCounter.objects.create(scope='demo', value=4)
    real_filter = SequenceCounter.objects.filter
    raced = []

    def racing_filter(*args, **kwargs):
        # another writer bumps the counter between our read and our update
        if 'value' in kwargs and not raced:
            raced.append(True)
            real_filter(scope='demo').update(value=5)
        return real_filter(*args, **kwargs)

    monkeypatch.setattr(SequenceCounter.objects, 'filter', racing_filter)
    assert sequences.advance('demo') == 6


def test_nurse_identifiers():
    a = Nurse.objects.create_user('a@ward.test', 'Ward@2024pass', name='A', department='Surgery')
    b = Nurse.objects.create_user('b@ward.test', 'Ward@2024pass', name='B', department='Surgery')
    assert (a.nurse_id, b.nurse_id) == ('N0001', 'N0002')
    a.name = 'A renamed'
    a.save()
    a.refresh_from_db()
    assert a.nurse_id == 'N0001'


def test_first_document_of_each_kind_is_001(patient):
    rx1 = Prescription.objects.create(prescription_id='RX-1', patient=patient, doctor_id='D', diagnosis='x')
    rx2 = Prescription.objects.create(prescription_id='RX-2', patient=patient, doctor_id='D', diagnosis='y')
    lab = LabReport.objects.create(report_id='LR-1', patient=patient, test_type='CBC')
    assert sequences.document_sequence_label(rx1) == 'P001'
    assert sequences.document_sequence_label(rx2) == 'P002'
    assert sequences.document_sequence_label(lab) == 'L001'


def test_document_sequence_seeds_from_labelled_records(patient):
    Prescription.objects.create(prescription_id='RX-1', patient=patient, doctor_id='D', diagnosis='x', sequence_label='P001')
    Prescription.objects.create(prescription_id='RX-2', patient=patient, doctor_id='D', diagnosis='x')
    rx3 = Prescription.objects.create(prescription_id='RX-3', patient=patient, doctor_id='D', diagnosis='x')
    assert sequences.document_sequence_label(rx3) == 'P002'


def test_assigned_label_is_reused(patient):
    rx = Prescription.objects.create(prescription_id='RX-1', patient=patient, doctor_id='D', diagnosis='x', sequence_label='P004')
    assert sequences.document_sequence_label(rx) == 'P004'


def test_label_is_claimed_on_the_record(patient):
    rx = Prescription.objects.create(prescription_id='RX-1', patient=patient, doctor_id='D', diagnosis='x')
    assert sequences.document_sequence_label(rx) == 'P001'
    assert Prescription.objects.get(pk=rx.pk).sequence_label == 'P001'


def test_label_taken_concurrently_does_not_use_up_a_number(patient):
    rx = Prescription.objects.create(prescription_id='RX-1', patient=patient, doctor_id='D', diagnosis='x')
    stale = Prescription.objects.get(pk=rx.pk)
    Prescription.objects.filter(pk=rx.pk).update(sequence_label='P001')

    assert sequences.document_sequence_label(stale) == 'P001'
    assert not SequenceCounter.objects.filter(scope=f'prescription:{patient.pk}').exists()

    rx2 = Prescription.objects.create(prescription_id='RX-2', patient=patient, doctor_id='D', diagnosis='y')
    assert sequences.document_sequence_label(rx2) == 'P002'


def test_document_filename(patient):
    rx = Prescription.objects.create(prescription_id='RX-1', patient=patient, doctor_id='D', diagnosis='x')
    lab = LabReport.objects.create(patient=patient)
    when = datetime(2024, 3, 5, 10, 0, tzinfo=dt_timezone.utc)
    millis = int(when.timestamp() * 1000)
    assert sequences.document_filename(rx, patient, 'P001', when) == f'PRXN-20240301001-P001-20240305-{millis}.pdf'
    assert sequences.document_filename(lab, patient, 'L001', when) == f'LABREP-20240301001-L001-20240305-{millis}.pdf'
