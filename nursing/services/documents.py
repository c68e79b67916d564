"""
Render-if-absent pipeline for prescription and lab report PDFs.

A record is ``Rendered`` when it carries a locator (the blob handle of its
PDF) and ``NoDocument`` otherwise; ``Rendering`` only exists while
:func:`generate` is running and is reported through the log and the
optional ``on_transition(record, old, new)`` callback.

The locator is written with a conditional update on the value read
before rendering, so two concurrent renders of the same record cannot
both win: the loser removes its own blob and returns the winner's
document. A locator whose blob has disappeared is reported as
:class:`DocumentMissing` by both :func:`generate` and :func:`fetch` and
is only replaced by an explicit ``regenerate``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from django.db import DatabaseError
from django.utils import timezone

from nursing.exceptions import (
    BlobNotFound, DocumentMissing, DocumentRenderError, InvalidHandle, RecordNotFound, StorageWriteError,
)
from nursing.models import LabReport, Nurse, Patient
from nursing.services.audit import log_action
from nursing.services.blobstore import BlobReader, BlobStore
from nursing.services.rendering import render_record
from nursing.services.sequences import document_filename, document_sequence_label, record_kind

logger = logging.getLogger(__name__)

NO_DOCUMENT = 'NoDocument'
RENDERING = 'Rendering'
RENDERED = 'Rendered'

PDF_CONTENT_TYPE = 'application/pdf'

Observer = Callable[[object, str, str], None]


@dataclass(frozen=True)
class RenderedDocument:
    locator: str
    filename: str


def document_state(record) -> str:
    return RENDERED if record.pdf_locator else NO_DOCUMENT


def _transition(record, old: str, new: str, on_transition: Optional[Observer]) -> None:
    logger.info('%s %s: %s -> %s', record_kind(record), record.pk, old, new)
    if on_transition is not None:
        on_transition(record, old, new)


def _patient_for(record) -> Patient:
    patient = Patient.objects.filter(pk=record.patient_id).first()
    if patient is None:
        raise RecordNotFound('Patient not found')
    return patient


def _discard(store: BlobStore, handle: str, reason: str) -> None:
    """Best effort removal of a blob nobody references any more."""
    try:
        store.delete(handle)
    except BlobNotFound:
        pass
    except (StorageWriteError, InvalidHandle) as exc:
        logger.warning('could not remove %s blob %s: %s', reason, handle, exc)


def _existing(record, store: BlobStore) -> RenderedDocument:
    try:
        present = store.exists(record.pdf_locator)
    except InvalidHandle:
        present = False
    if not present:
        logger.warning('%s %s points at missing blob %s', record_kind(record), record.pk, record.pdf_locator)
        raise DocumentMissing()
    return RenderedDocument(record.pdf_locator, record.pdf_filename)


def generate(
    record,
    store: BlobStore,
    *,
    regenerate: bool = False,
    nurse: Optional[Nurse] = None,
    on_transition: Optional[Observer] = None,
    prescriber: Optional[tuple] = None,
) -> RenderedDocument:
    """Return the record's PDF, rendering and storing it first if needed."""
    if record.pdf_locator and not regenerate:
        return _existing(record, store)

    before = document_state(record)
    previous = record.pdf_locator
    _transition(record, before, RENDERING, on_transition)
    try:
        doc = _render_and_persist(record, store, previous, nurse, prescriber)
    except Exception:
        _transition(record, RENDERING, document_state(record), on_transition)
        raise
    _transition(record, RENDERING, RENDERED, on_transition)

    if previous and previous != doc.locator:
        _discard(store, previous, 'superseded')
    log_action(
        nurse=nurse,
        action='document_render',
        object_type=record_kind(record),
        object_id=record.pk,
        detail={'locator': doc.locator, 'fileName': doc.filename, 'regenerate': bool(regenerate)},
    )
    return doc


def _render_and_persist(record, store: BlobStore, previous: Optional[str], nurse, prescriber) -> RenderedDocument:
    patient = _patient_for(record)
    label = document_sequence_label(record)
    now = timezone.now()
    filename = document_filename(record, patient, label, timezone.localtime(now))

    try:
        payload = render_record(record, patient, prescriber)
    except Exception as exc:
        logger.exception('rendering %s %s failed', record_kind(record), record.pk)
        raise DocumentRenderError() from exc

    handle = store.store(
        payload,
        name=filename,
        content_type=PDF_CONTENT_TYPE,
        metadata={'kind': record_kind(record), 'recordId': record.pk, 'patientId': patient.patient_id},
    )

    fields = {'pdf_locator': handle, 'pdf_filename': filename, 'sequence_label': label, 'updated_at': now}
    if isinstance(record, LabReport):
        fields.update(uploaded_by=nurse if nurse is not None and nurse.pk else None, uploaded_at=now)
    model = type(record)
    try:
        updated = model.objects.filter(pk=record.pk, pdf_locator=previous).update(**fields)
    except DatabaseError as exc:
        _discard(store, handle, 'unpersisted')
        raise StorageWriteError('Could not save document reference') from exc

    if not updated:
        _discard(store, handle, 'losing')
        current = model.objects.filter(pk=record.pk).values('pdf_locator', 'pdf_filename', 'sequence_label').first()
        if current is None:
            raise RecordNotFound()
        if not current['pdf_locator']:
            raise DocumentRenderError('Document changed during rendering, please retry')
        logger.info('%s %s rendered concurrently, using %s', record_kind(record), record.pk, current['pdf_locator'])
        for name, value in current.items():
            setattr(record, name, value)
        return RenderedDocument(record.pdf_locator, record.pdf_filename)

    for name, value in fields.items():
        setattr(record, name, value)
    return RenderedDocument(handle, filename)


def fetch(record, store: BlobStore, **kwargs) -> Tuple[RenderedDocument, BlobReader]:
    """:func:`generate` followed by opening the stored bytes."""
    doc = generate(record, store, **kwargs)
    try:
        reader = store.retrieve(doc.locator)
    except (BlobNotFound, InvalidHandle):
        raise DocumentMissing()
    return doc, reader
