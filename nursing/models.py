"""
Database models for the ward nursing backend.

Nurses are the only authenticated staff of this service. Patients own
their visits and uploaded documents; prescriptions and lab reports are
written by the external doctor system and only read (and rendered to
PDF) here. Binary payloads never live on these rows: they hold opaque
handles into the chunked blob store defined at the bottom of the module.
"""
from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils import timezone


class NurseManager(BaseUserManager):
    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Nurses must have an email address')
        nurse = self.model(email=self.normalize_email(email), **extra_fields)
        nurse.set_password(password)
        nurse.save(using=self._db)
        return nurse

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('role', Nurse.ROLE_HEAD)
        extra_fields.setdefault('department', Nurse.DEPARTMENT_CHOICES[0][0])
        return self.create_user(email, password, **extra_fields)


class Nurse(AbstractBaseUser, PermissionsMixin):
    """Ward staff account.

    ``nurse_id`` (``N0001``, ``N0002`` ...) is assigned once when the row
    is first saved and never reassigned. The password is stored only as a
    Django password hash. ``is_active`` is derived from ``status`` so that
    deactivated nurses are rejected everywhere Django checks it.
    """
    ROLE_HEAD = 'Head Nurse'
    ROLE_STAFF = 'Staff Nurse'
    ROLE_JUNIOR = 'Junior Nurse'
    ROLE_CHOICES = [
        (ROLE_HEAD, 'Head Nurse'),
        (ROLE_STAFF, 'Staff Nurse'),
        (ROLE_JUNIOR, 'Junior Nurse'),
    ]
    DEPARTMENT_CHOICES = [
        ('General Medicine', 'General Medicine'),
        ('Pediatrics', 'Pediatrics'),
        ('Surgery', 'Surgery'),
        ('Orthopedics', 'Orthopedics'),
        ('Cardiology', 'Cardiology'),
        ('Emergency', 'Emergency'),
        ('Neurology', 'Neurology'),
    ]
    STATUS_ACTIVE = 'Active'
    STATUS_INACTIVE = 'Inactive'
    STATUS_CHOICES = [(STATUS_ACTIVE, 'Active'), (STATUS_INACTIVE, 'Inactive')]

    nurse_id = models.CharField(max_length=16, unique=True, editable=False)
    name = models.CharField(max_length=255)
    email = models.EmailField(unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_STAFF)
    department = models.CharField(max_length=32, choices=DEPARTMENT_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE, db_index=True)
    is_staff = models.BooleanField(default=False)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = NurseManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = ['name', 'department']

    @property
    def is_active(self) -> bool:
        return self.status == self.STATUS_ACTIVE

    def save(self, *args, **kwargs):
        if self._state.adding and not self.nurse_id:
            from nursing.services.sequences import next_nurse_identifier
            self.nurse_id = next_nurse_identifier()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} ({self.nurse_id})"


class Patient(models.Model):
    """A registered ward patient.

    ``patient_id`` is the human readable identifier (``YYYYMMDD`` plus a
    three digit daily serial). It is set at registration and may not be
    changed afterwards. Patients are deactivated, never deleted.
    """
    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    ]
    patient_id = models.CharField(max_length=20, unique=True, editable=False)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField()
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES)
    contact = models.CharField(max_length=64)
    emergency_contact = models.CharField(max_length=64, blank=True)
    address = models.TextField(blank=True)
    medical_history = models.TextField(blank=True, default='')

    photo_handle = models.CharField(max_length=32, blank=True, null=True)
    photo_content_type = models.CharField(max_length=128, blank=True)
    photo_uploaded_at = models.DateTimeField(blank=True, null=True)
    photo_uploaded_by = models.ForeignKey(
        Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )
    id_proof_handle = models.CharField(max_length=32, blank=True, null=True)
    id_proof_content_type = models.CharField(max_length=128, blank=True)
    id_proof_uploaded_at = models.DateTimeField(blank=True, null=True)
    id_proof_uploaded_by = models.ForeignKey(
        Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='+'
    )

    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_patient_id = instance.__dict__.get('patient_id')
        return instance

    def save(self, *args, **kwargs):
        loaded = getattr(self, '_loaded_patient_id', None)
        if loaded and loaded != self.patient_id:
            raise ValueError('patient_id is immutable once assigned')
        super().save(*args, **kwargs)
        self._loaded_patient_id = self.patient_id

    def __str__(self) -> str:
        return f"{self.name} ({self.patient_id})"


class Visit(models.Model):
    """Vitals snapshot taken during one visit. Owned by its patient."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='visits')
    date = models.DateTimeField(default=timezone.now)
    weight = models.FloatField(help_text="kg")
    height = models.FloatField(help_text="cm")
    blood_pressure = models.CharField(max_length=20)
    heart_rate = models.PositiveIntegerField()
    temperature = models.FloatField()
    chief_complaint = models.CharField(max_length=255, default='Regular checkup')
    bmi = models.CharField(max_length=10, blank=True)
    bmi_category = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['date', 'id']

    def __str__(self) -> str:
        return f"Visit {self.id} of {self.patient_id} @ {self.date:%F}"


class PatientDocument(models.Model):
    """Descriptor of a file uploaded for a patient; bytes live in the blob store."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='documents')
    name = models.CharField(max_length=255)
    content_type = models.CharField(max_length=128)
    handle = models.CharField(max_length=32)
    uploaded_by = models.ForeignKey(
        Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='uploaded_documents'
    )
    uploaded_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['uploaded_at', 'id']

    def __str__(self) -> str:
        return f"{self.name} ({self.patient_id})"


# ---------------------------------------------------------------------------
# Clinical records written by the doctor system
# ---------------------------------------------------------------------------

class Prescription(models.Model):
    STATUS_CHOICES = [('draft', 'draft'), ('final', 'final')]
    ADMINISTRATION_CHOICES = [
        ('pending', 'pending'),
        ('in-progress', 'in-progress'),
        ('completed', 'completed'),
        ('cancelled', 'cancelled'),
    ]

    prescription_id = models.CharField(max_length=64, unique=True)
    # Weak reference: the doctor system owns these rows, so no FK constraint.
    patient = models.ForeignKey(
        Patient, on_delete=models.DO_NOTHING, db_constraint=False, related_name='prescriptions'
    )
    doctor_id = models.CharField(max_length=64)
    date = models.DateTimeField(default=timezone.now)
    diagnosis = models.TextField()
    clinical_notes = models.TextField(blank=True)
    special_instructions = models.TextField(blank=True)
    follow_up = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='final', db_index=True)

    pdf_locator = models.CharField(max_length=32, blank=True, null=True)
    pdf_filename = models.CharField(max_length=255, blank=True)
    sequence_label = models.CharField(max_length=10, blank=True)

    # Administration is tracked by another service; these are read only here.
    nurse = models.ForeignKey(Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    nurse_notes = models.TextField(blank=True)
    administration_status = models.CharField(
        max_length=16, choices=ADMINISTRATION_CHOICES, default='pending', db_index=True
    )
    administered_medications = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'date'], name='nursing_pre_patient_0b6c4e_idx')]

    def __str__(self) -> str:
        return f"Prescription {self.prescription_id}"


class Medication(models.Model):
    prescription = models.ForeignKey(Prescription, on_delete=models.CASCADE, related_name='medications')
    position = models.PositiveIntegerField(default=0)
    medicine = models.CharField(max_length=255)
    dosage = models.CharField(max_length=255)
    duration = models.CharField(max_length=255)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ['position', 'id']

    def __str__(self) -> str:
        return f"{self.medicine} {self.dosage}"


class LabReport(models.Model):
    STATUS_CHOICES = [
        ('pending', 'pending'),
        ('completed', 'completed'),
        ('ordered', 'ordered'),
        ('in-progress', 'in-progress'),
    ]

    report_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    patient = models.ForeignKey(
        Patient, on_delete=models.DO_NOTHING, db_constraint=False, related_name='lab_reports'
    )
    doctor_id = models.CharField(max_length=64, blank=True)
    ordered_by = models.CharField(max_length=64, blank=True)
    date = models.DateTimeField(default=timezone.now)
    test_type = models.CharField(max_length=255, blank=True, db_index=True)
    name = models.CharField(max_length=255, blank=True)
    test_results = models.TextField(blank=True)
    normal_range = models.CharField(max_length=255, blank=True)
    interpretation = models.TextField(blank=True)
    recommendations = models.TextField(blank=True)
    findings = models.TextField(blank=True)
    instructions = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default='pending', db_index=True)

    pdf_locator = models.CharField(max_length=32, blank=True, null=True)
    pdf_filename = models.CharField(max_length=255, blank=True)
    sequence_label = models.CharField(max_length=10, blank=True)

    uploaded_by = models.ForeignKey(Nurse, null=True, blank=True, on_delete=models.SET_NULL, related_name='+')
    uploaded_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'date'], name='nursing_lab_patient_5f2a9d_idx')]

    def __str__(self) -> str:
        return f"LabReport {self.report_id or self.pk}"


# ---------------------------------------------------------------------------
# Chunked blob store & counters
# ---------------------------------------------------------------------------

class StoredBlob(models.Model):
    """File entry of the chunked store. Access only through ``BlobStore``."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bucket = models.CharField(max_length=64, db_index=True)
    filename = models.CharField(max_length=255)
    content_type = models.CharField(max_length=128, blank=True)
    length = models.BigIntegerField(default=0)
    chunk_size = models.PositiveIntegerField()
    metadata = models.JSONField(default=dict, blank=True)
    upload_date = models.DateTimeField(default=timezone.now)

    def __str__(self) -> str:
        return f"{self.bucket}/{self.id.hex} {self.filename}"


class BlobChunk(models.Model):
    blob = models.ForeignKey(StoredBlob, on_delete=models.CASCADE, related_name='chunks')
    n = models.PositiveIntegerField()
    data = models.BinaryField()

    class Meta:
        ordering = ['n']
        constraints = [
            models.UniqueConstraint(fields=['blob', 'n'], name='uniq_blob_chunk_n'),
        ]

    def __str__(self) -> str:
        return f"chunk {self.n} of {self.blob_id}"


class SequenceCounter(models.Model):
    """Last issued value per counter scope, advanced by compare-and-swap."""
    scope = models.CharField(max_length=64, unique=True)
    value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.scope}={self.value}"


class AuditEvent(models.Model):
    nurse = models.ForeignKey(Nurse, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.CharField(max_length=64, blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='nursing_aud_action_3c1d7e_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='nursing_aud_object__8e4b2f_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.action}:{self.nurse_id}@{self.created_at:%F %T}"
