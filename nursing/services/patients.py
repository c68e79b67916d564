import logging
from datetime import date
from typing import Iterable, List, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from nursing.exceptions import BlobNotFound, RecordNotFound, StorageWriteError
from nursing.models import Nurse, Patient, PatientDocument, Visit
from nursing.services.audit import log_action
from nursing.services.blobstore import BlobReader, BlobStore
from nursing.services.sequences import next_patient_identifier

logger = logging.getLogger(__name__)

# request field name -> model field prefix
PROFILE_SLOTS = {'photo': 'photo', 'idProof': 'id_proof'}
PROFILE_LABELS = {'photo': 'Photo', 'idProof': 'ID proof'}


def get_patient(pk) -> Patient:
    patient = Patient.objects.filter(pk=pk).first()
    if patient is None:
        raise RecordNotFound('Patient not found')
    return patient


@transaction.atomic
def register_patient(nurse: Optional[Nurse], *, name, age, gender, contact, emergency_contact='', address='', medical_history='', today: Optional[date]=None) -> Patient:
    patient = Patient.objects.create(
        patient_id=next_patient_identifier(today),
        name=name, age=age, gender=gender, contact=contact,
        emergency_contact=emergency_contact or '', address=address or '',
        medical_history=medical_history or '',
    )
    log_action(nurse=nurse, action='patient_register', object_type='patient', object_id=patient.pk, detail={'patientId': patient.patient_id})
    return patient


def deactivate_patient(nurse: Optional[Nurse], patient: Patient) -> Patient:
    if patient.is_active:
        patient.is_active = False
        patient.save(update_fields=['is_active', 'updated_at'])
        log_action(nurse=nurse, action='patient_deactivate', object_type='patient', object_id=patient.pk)
    return patient


def bmi_for(weight: float, height_cm: float) -> Tuple[str, str]:
    """BMI to one decimal and its WHO adult category."""
    meters = height_cm / 100.0
    bmi = round(weight / (meters * meters), 1)
    if bmi < 18.5:
        category = 'Underweight'
    elif bmi < 25:
        category = 'Normal'
    elif bmi < 30:
        category = 'Overweight'
    else:
        category = 'Obese'
    return f'{bmi:.1f}', category


def add_visit(patient: Patient, *, weight, height, blood_pressure, heart_rate, temperature, chief_complaint=None, notes='') -> Visit:
    bmi, category = bmi_for(weight, height)
    return Visit.objects.create(
        patient=patient,
        weight=weight, height=height, blood_pressure=blood_pressure,
        heart_rate=heart_rate, temperature=temperature,
        chief_complaint=chief_complaint or 'Regular checkup',
        bmi=bmi, bmi_category=category, notes=notes or '',
    )


def validate_upload(f) -> str:
    size_mb = (f.size or 0) / (1024*1024)
    if size_mb > settings.UPLOAD_MAX_MB:
        raise ValidationError({'file': f'{f.name}: file too large'})
    ctype = getattr(f, 'content_type', '') or ''
    if not any(ctype.startswith(prefix) for prefix in settings.ALLOWED_UPLOAD_TYPES):
        raise ValidationError({'file': f'{f.name}: unsupported file type'})
    return ctype


def _discard(store: BlobStore, handles: Iterable[str]) -> None:
    for handle in handles:
        try:
            store.delete(handle)
        except (BlobNotFound, StorageWriteError) as exc:
            logger.warning('could not remove blob %s: %s', handle, exc)


# ---------------------------------------------------------------------------
# Uploaded documents
# ---------------------------------------------------------------------------

def attach_documents(nurse: Optional[Nurse], patient: Patient, files: List, store: BlobStore) -> List[PatientDocument]:
    if not files:
        raise ValidationError({'files': 'No files uploaded'})
    types = [validate_upload(f) for f in files]
    uploader = nurse if nurse is not None and nurse.pk else None

    stored: List[str] = []
    documents: List[PatientDocument] = []
    try:
        for f, ctype in zip(files, types):
            handle = store.store(
                f, name=f.name, content_type=ctype,
                metadata={'patientId': patient.patient_id, 'uploadedBy': getattr(uploader, 'nurse_id', None)},
            )
            stored.append(handle)
            documents.append(PatientDocument(patient=patient, name=f.name, content_type=ctype, handle=handle, uploaded_by=uploader))
        with transaction.atomic():
            for doc in documents:
                doc.save()
    except DatabaseError as exc:
        _discard(store, stored)
        raise StorageWriteError('Could not save document records') from exc
    except StorageWriteError:
        _discard(store, stored)
        raise

    log_action(nurse=uploader, action='document_upload', object_type='patient', object_id=patient.pk,
               detail={'documents': [d.pk for d in documents]})
    return documents


def get_document(patient: Patient, doc_pk) -> PatientDocument:
    doc = patient.documents.filter(pk=doc_pk).first()
    if doc is None:
        raise RecordNotFound('Document not found')
    return doc


def open_document(doc: PatientDocument, store: BlobStore) -> BlobReader:
    return store.retrieve(doc.handle)


def rename_document(doc: PatientDocument, new_name: str) -> PatientDocument:
    doc.name = new_name
    doc.save(update_fields=['name'])
    return doc


def delete_document(nurse: Optional[Nurse], doc: PatientDocument, store: BlobStore) -> None:
    """Remove the descriptor and its blob.

    A descriptor whose blob is already gone is still removed.
    """
    try:
        store.delete(doc.handle)
    except BlobNotFound:
        logger.warning('document %s had no blob %s', doc.pk, doc.handle)
    log_action(nurse=nurse, action='document_delete', object_type='patient', object_id=doc.patient_id,
               detail={'document': doc.pk, 'name': doc.name})
    doc.delete()


# ---------------------------------------------------------------------------
# Photo / ID proof
# ---------------------------------------------------------------------------

def _slot_field(slot: str) -> str:
    if slot not in PROFILE_SLOTS:
        raise ValueError(f'unknown profile slot {slot}')
    return PROFILE_SLOTS[slot]


def upload_profile_files(nurse: Optional[Nurse], patient: Patient, store: BlobStore, files: dict) -> Patient:
    """Store ``files`` ({'photo': f, 'idProof': f}) and point the patient at them.

    A replaced photo or ID proof blob is removed once the patient row is saved.
    """
    files = {slot: f for slot, f in files.items() if slot in PROFILE_SLOTS and f is not None}
    if not files:
        raise ValidationError({'files': 'Provide photo and/or idProof'})
    types = {slot: validate_upload(f) for slot, f in files.items()}
    uploader = nurse if nurse is not None and nurse.pk else None
    now = timezone.now()

    stored, superseded, update_fields = [], [], ['updated_at']
    try:
        for slot, f in files.items():
            field = _slot_field(slot)
            handle = store.store(
                f, name=f.name, content_type=types[slot],
                metadata={'patientId': patient.patient_id, 'type': slot, 'uploadedBy': getattr(uploader, 'nurse_id', None)},
            )
            stored.append(handle)
            previous = getattr(patient, f'{field}_handle')
            if previous:
                superseded.append(previous)
            setattr(patient, f'{field}_handle', handle)
            setattr(patient, f'{field}_content_type', types[slot])
            setattr(patient, f'{field}_uploaded_at', now)
            setattr(patient, f'{field}_uploaded_by', uploader)
            update_fields += [f'{field}_handle', f'{field}_content_type', f'{field}_uploaded_at', f'{field}_uploaded_by']
        patient.save(update_fields=update_fields)
    except DatabaseError as exc:
        _discard(store, stored)
        raise StorageWriteError('Could not save patient files') from exc
    except StorageWriteError:
        _discard(store, stored)
        raise

    _discard(store, superseded)
    log_action(nurse=uploader, action='profile_upload', object_type='patient', object_id=patient.pk, detail={'slots': sorted(files)})
    return patient


def open_profile_file(patient: Patient, slot: str, store: BlobStore) -> Tuple[BlobReader, str]:
    field = _slot_field(slot)
    handle = getattr(patient, f'{field}_handle')
    if not handle:
        raise RecordNotFound(f'{PROFILE_LABELS[slot]} not found')
    return store.retrieve(handle), getattr(patient, f'{field}_content_type')


def delete_profile_file(nurse: Optional[Nurse], patient: Patient, slot: str, store: BlobStore) -> None:
    field = _slot_field(slot)
    handle = getattr(patient, f'{field}_handle')
    if not handle:
        raise RecordNotFound(f'Patient {PROFILE_LABELS[slot].lower()} not found')
    try:
        store.delete(handle)
    except BlobNotFound:
        logger.warning('patient %s %s blob %s already gone', patient.pk, slot, handle)
    setattr(patient, f'{field}_handle', None)
    setattr(patient, f'{field}_content_type', '')
    setattr(patient, f'{field}_uploaded_at', None)
    setattr(patient, f'{field}_uploaded_by', None)
    patient.save(update_fields=[f'{field}_handle', f'{field}_content_type', f'{field}_uploaded_at', f'{field}_uploaded_by', 'updated_at'])
    log_action(nurse=nurse, action='profile_delete', object_type='patient', object_id=patient.pk, detail={'slot': slot})
