import re

import pytest
from django.db import DatabaseError
from django.db.models.query import QuerySet

from nursing.exceptions import DocumentMissing, DocumentRenderError, RecordNotFound, StorageWriteError
from nursing.models import AuditEvent, LabReport, Prescription, StoredBlob
from nursing.services import documents
from nursing.services.documents import NO_DOCUMENT, RENDERED, RENDERING

pytestmark = pytest.mark.django_db


def test_lab_report_render_transitions_and_persists_locator(lab_report, store, nurse):
    seen = []
    doc = documents.generate(lab_report, store, nurse=nurse, on_transition=lambda r, old, new: seen.append((old, new)))

    assert seen == [(NO_DOCUMENT, RENDERING), (RENDERING, RENDERED)]
    lab_report.refresh_from_db()
    assert lab_report.pdf_locator == doc.locator
    assert lab_report.pdf_filename == doc.filename
    assert lab_report.sequence_label == 'L001'
    assert lab_report.uploaded_by == nurse
    assert doc.filename.startswith('LABREP-20240301001-L001-')
    assert documents.document_state(lab_report) == RENDERED
    assert store.retrieve(doc.locator).read().startswith(b'%PDF')
    assert AuditEvent.objects.filter(action='document_render', object_id=str(lab_report.pk)).exists()


def test_repeat_generate_returns_same_locator(prescription, store):
    first = documents.generate(prescription, store)
    again = documents.generate(Prescription.objects.get(pk=prescription.pk), store)
    assert again == first
    assert StoredBlob.objects.count() == 1


def test_fetch_streams_rendered_pdf(prescription, store):
    doc, reader = documents.fetch(prescription, store)
    assert reader.content_type == 'application/pdf'
    assert reader.filename == doc.filename
    assert reader.read().startswith(b'%PDF')


def test_missing_blob_is_reported_not_rerendered(prescription, store):
    doc = documents.generate(prescription, store)
    store.delete(doc.locator)
    with pytest.raises(DocumentMissing):
        documents.fetch(prescription, store)
    with pytest.raises(DocumentMissing):
        documents.generate(prescription, store)
    assert StoredBlob.objects.count() == 0


def test_regenerate_replaces_locator_and_removes_old_blob(prescription, store):
    old = documents.generate(prescription, store)
    new = documents.generate(prescription, store, regenerate=True)

    assert new.locator != old.locator
    assert not store.exists(old.locator)
    assert store.exists(new.locator)
    prescription.refresh_from_db()
    assert prescription.pdf_locator == new.locator
    assert prescription.sequence_label == 'P001'


def test_regenerate_recovers_from_missing_blob(prescription, store):
    doc = documents.generate(prescription, store)
    store.delete(doc.locator)
    fresh = documents.generate(prescription, store, regenerate=True)
    assert store.exists(fresh.locator)


def test_storage_failure_leaves_no_locator(prescription, store, monkeypatch):
    seen = []

    def fail(*args, **kwargs):
        raise StorageWriteError()

    monkeypatch.setattr(store, 'store', fail)
    with pytest.raises(StorageWriteError):
        documents.generate(prescription, store, on_transition=lambda r, old, new: seen.append((old, new)))

    assert seen == [(NO_DOCUMENT, RENDERING), (RENDERING, NO_DOCUMENT)]
    prescription.refresh_from_db()
    assert prescription.pdf_locator is None


def test_failed_locator_write_removes_new_blob(prescription, store, monkeypatch):
    prescription.sequence_label = 'P001'
    prescription.save(update_fields=['sequence_label'])

    def fail(self, **kwargs):
        raise DatabaseError('locked')

    monkeypatch.setattr(QuerySet, 'update', fail)
    with pytest.raises(StorageWriteError):
        documents.generate(prescription, store)
    monkeypatch.undo()

    assert StoredBlob.objects.count() == 0
    prescription.refresh_from_db()
    assert prescription.pdf_locator is None


def test_failed_render_keeps_first_label_for_retry(prescription, store, monkeypatch):
    def broken(*args, **kwargs):
        raise ValueError('font missing')

    monkeypatch.setattr(documents, 'render_record', broken)
    with pytest.raises(DocumentRenderError):
        documents.generate(prescription, store)
    monkeypatch.undo()
    assert StoredBlob.objects.count() == 0

    doc = documents.generate(Prescription.objects.get(pk=prescription.pk), store)
    assert '-P001-' in doc.filename
    prescription.refresh_from_db()
    assert prescription.sequence_label == 'P001'
    assert prescription.pdf_locator == doc.locator


def test_losing_render_adopts_winner(prescription, store):
    winner = store.store(b'%PDF-winner', name='winner.pdf', content_type='application/pdf')

    def other_request_finishes_first(record, old, new):
        if new == RENDERING:
            Prescription.objects.filter(pk=record.pk).update(pdf_locator=winner, pdf_filename='winner.pdf')

    doc = documents.generate(prescription, store, on_transition=other_request_finishes_first)

    assert doc.locator == winner
    assert doc.filename == 'winner.pdf'
    assert StoredBlob.objects.count() == 1


def test_missing_patient_is_not_found(store, patient):
    orphan = LabReport.objects.create(patient_id=patient.pk + 1000, test_type='CBC')
    with pytest.raises(RecordNotFound):
        documents.generate(orphan, store)
    assert StoredBlob.objects.count() == 0


def test_long_text_flows_onto_more_pages(prescription, store):
    prescription.clinical_notes = '\n'.join(f'Observation {i}: ' + 'stable vitals ' * 12 for i in range(120))
    prescription.save()
    _, reader = documents.fetch(prescription, store)
    pages = max(int(n) for n in re.findall(rb'/Count (\d+)', reader.read()))
    assert pages >= 2
