"""
Django admin registrations for the nursing models.

Blob chunks are not registered; stored blobs are listed read only so
that administrators can check what a handle points at.
"""

from django.contrib import admin

from .models import (
    Nurse,
    Patient,
    Visit,
    PatientDocument,
    Prescription,
    Medication,
    LabReport,
    StoredBlob,
    SequenceCounter,
    AuditEvent,
)


@admin.register(Nurse)
class NurseAdmin(admin.ModelAdmin):
    list_display = ('nurse_id', 'name', 'email', 'role', 'department', 'status')
    list_filter = ('role', 'department', 'status')
    search_fields = ('nurse_id', 'name', 'email')
    exclude = ('password',)
    readonly_fields = ('nurse_id', 'last_login', 'date_joined')


class VisitInline(admin.TabularInline):
    model = Visit
    extra = 0


class PatientDocumentInline(admin.TabularInline):
    model = PatientDocument
    extra = 0
    readonly_fields = ('handle', 'content_type', 'uploaded_by', 'uploaded_at')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_id', 'name', 'age', 'gender', 'contact', 'is_active', 'created_at')
    list_filter = ('gender', 'is_active')
    search_fields = ('patient_id', 'name', 'contact')
    readonly_fields = ('patient_id', 'photo_handle', 'id_proof_handle')
    inlines = [VisitInline, PatientDocumentInline]


class MedicationInline(admin.TabularInline):
    model = Medication
    extra = 0


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('prescription_id', 'patient_id', 'doctor_id', 'date', 'status', 'administration_status', 'sequence_label')
    list_filter = ('status', 'administration_status')
    search_fields = ('prescription_id', 'diagnosis')
    readonly_fields = ('pdf_locator', 'pdf_filename', 'sequence_label')
    inlines = [MedicationInline]


@admin.register(LabReport)
class LabReportAdmin(admin.ModelAdmin):
    list_display = ('report_id', 'patient_id', 'test_type', 'date', 'status', 'sequence_label')
    list_filter = ('status', 'test_type')
    search_fields = ('report_id', 'name', 'test_type')
    readonly_fields = ('pdf_locator', 'pdf_filename', 'sequence_label')


@admin.register(StoredBlob)
class StoredBlobAdmin(admin.ModelAdmin):
    list_display = ('id', 'bucket', 'filename', 'content_type', 'length', 'upload_date')
    list_filter = ('bucket', 'content_type')
    search_fields = ('filename',)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(SequenceCounter)
class SequenceCounterAdmin(admin.ModelAdmin):
    list_display = ('scope', 'value', 'updated_at')
    search_fields = ('scope',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'nurse', 'object_type', 'object_id')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id',)
