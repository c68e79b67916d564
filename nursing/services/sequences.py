"""
Human readable identifiers.

* Patients: ``YYYYMMDD`` + daily serial (``20240301001``).
* Nurses: ``N`` + four digit serial (``N0001``).
* Rendered documents: per patient and kind display label (``P001``,
  ``L001``) plus a stored filename that embeds the date and a millisecond
  timestamp.

Each series is a ``SequenceCounter`` row. The first time a scope is used
its counter is seeded from the rows that already exist (highest serial
so far), after which values are only handed out by a conditional
``UPDATE ... WHERE value = <seen>``, so two concurrent callers can never
receive the same number.
"""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Union

from django.db import IntegrityError, transaction
from django.utils import timezone

from nursing.exceptions import RecordNotFound, StorageWriteError
from nursing.models import LabReport, Nurse, Patient, Prescription, SequenceCounter

logger = logging.getLogger(__name__)

MAX_CAS_ATTEMPTS = 25

KIND_PRESCRIPTION = 'prescription'
KIND_LAB_REPORT = 'lab_report'

KIND_PREFIX = {KIND_PRESCRIPTION: 'P', KIND_LAB_REPORT: 'L'}
KIND_FILE_PREFIX = {KIND_PRESCRIPTION: 'PRXN', KIND_LAB_REPORT: 'LABREP'}


def advance(scope: str, seed: Union[int, Callable[[], int]] = 0) -> int:
    """Return the next value of the counter ``scope``.

    ``seed`` (a value or a callable) is the "count so far" used only when
    the scope has never been seen; the first value returned is seed + 1.
    """
    counter = SequenceCounter.objects.filter(scope=scope).first()
    if counter is None:
        initial = seed() if callable(seed) else seed
        try:
            with transaction.atomic():
                counter = SequenceCounter.objects.create(scope=scope, value=initial)
        except IntegrityError:
            # another request created the scope first
            counter = SequenceCounter.objects.get(scope=scope)

    for _ in range(MAX_CAS_ATTEMPTS):
        seen = counter.value
        updated = SequenceCounter.objects.filter(scope=scope, value=seen).update(
            value=seen + 1, updated_at=timezone.now()
        )
        if updated:
            return seen + 1
        counter.refresh_from_db(fields=['value'])
    logger.warning('counter %s still contended after %d attempts', scope, MAX_CAS_ATTEMPTS)
    raise StorageWriteError('Identifier counter is busy, please retry')


def _highest_serial(identifiers: Iterable[str], prefix: str) -> int:
    serials = [int(i[len(prefix):]) for i in identifiers if i and i[len(prefix):].isdigit()]
    return max(serials, default=0)


def patient_prefix(day: date) -> str:
    return day.strftime('%Y%m%d')


def next_patient_identifier(today: Optional[date] = None) -> str:
    day = today or timezone.localdate()
    prefix = patient_prefix(day)

    def seed() -> int:
        ids = Patient.objects.filter(patient_id__startswith=prefix).values_list('patient_id', flat=True)
        return _highest_serial(ids, prefix)

    serial = advance(f'patient:{prefix}', seed)
    return f'{prefix}{serial:03d}'


def next_nurse_identifier() -> str:
    def seed() -> int:
        ids = Nurse.objects.filter(nurse_id__startswith='N').values_list('nurse_id', flat=True)
        return _highest_serial(ids, 'N')

    return f"N{advance('nurse', seed):04d}"


def record_kind(record) -> str:
    if isinstance(record, Prescription):
        return KIND_PRESCRIPTION
    if isinstance(record, LabReport):
        return KIND_LAB_REPORT
    raise TypeError(f'no document sequence for {type(record).__name__}')


def document_sequence_label(record) -> str:
    """Display label of ``record`` among its patient's documents of the same kind.

    The label is claimed on the record row in the same transaction that
    advances the counter, so a render that later fails keeps its label for
    the retry and two concurrent first renders of one record share it.
    Filenames stay unique through their timestamp suffix.
    """
    if record.sequence_label:
        return record.sequence_label
    kind = record_kind(record)
    model = type(record)

    def seed() -> int:
        return (
            model.objects.filter(patient_id=record.patient_id)
            .exclude(pk=record.pk)
            .exclude(sequence_label='')
            .count()
        )

    with transaction.atomic():
        n = advance(f'{kind}:{record.patient_id}', seed)
        label = f'{KIND_PREFIX[kind]}{n:03d}'
        claimed = model.objects.filter(pk=record.pk, sequence_label='').update(sequence_label=label)
        if not claimed:
            # labelled concurrently (or gone): give the number back
            transaction.set_rollback(True)

    if not claimed:
        label = model.objects.filter(pk=record.pk).values_list('sequence_label', flat=True).first()
        if not label:
            raise RecordNotFound()
    record.sequence_label = label
    return label


def document_filename(record, patient: Patient, label: str, now: Optional[datetime] = None) -> str:
    """``PRXN-<patient>-P001-<YYYYMMDD>-<epoch ms>.pdf`` (``LABREP`` for lab reports)."""
    now = now or timezone.localtime()
    millis = int(now.timestamp() * 1000)
    prefix = KIND_FILE_PREFIX[record_kind(record)]
    return f'{prefix}-{patient.patient_id}-{label}-{now:%Y%m%d}-{millis}.pdf'
