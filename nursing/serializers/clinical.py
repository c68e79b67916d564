from rest_framework import serializers

from nursing.models import LabReport, Medication, Prescription


class MedicationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Medication
        fields = ['medicine', 'dosage', 'duration', 'notes']


class PrescriptionSerializer(serializers.ModelSerializer):
    prescriptionId = serializers.CharField(source='prescription_id')
    patientId = serializers.IntegerField(source='patient_id')
    doctorId = serializers.CharField(source='doctor_id')
    clinicalNotes = serializers.CharField(source='clinical_notes')
    specialInstructions = serializers.CharField(source='special_instructions')
    followUp = serializers.CharField(source='follow_up')
    medications = MedicationSerializer(many=True, read_only=True)
    pdfFileName = serializers.CharField(source='pdf_filename')
    hasPdf = serializers.SerializerMethodField()
    sequenceLabel = serializers.CharField(source='sequence_label')
    nurseNotes = serializers.CharField(source='nurse_notes')
    administrationStatus = serializers.CharField(source='administration_status')
    administeredMedications = serializers.JSONField(source='administered_medications')

    class Meta:
        model = Prescription
        fields = ['id', 'prescriptionId', 'patientId', 'doctorId', 'date', 'diagnosis', 'clinicalNotes',
                  'medications', 'specialInstructions', 'followUp', 'status', 'pdfFileName', 'hasPdf',
                  'sequenceLabel', 'nurseNotes', 'administrationStatus', 'administeredMedications']

    def get_hasPdf(self, obj) -> bool:
        return bool(obj.pdf_locator)


class LabReportSerializer(serializers.ModelSerializer):
    reportId = serializers.CharField(source='report_id')
    patientId = serializers.IntegerField(source='patient_id')
    doctorId = serializers.CharField(source='doctor_id')
    orderedBy = serializers.CharField(source='ordered_by')
    testType = serializers.CharField(source='test_type')
    testResults = serializers.CharField(source='test_results')
    normalRange = serializers.CharField(source='normal_range')
    pdfFileName = serializers.CharField(source='pdf_filename')
    hasPdf = serializers.SerializerMethodField()
    sequenceLabel = serializers.CharField(source='sequence_label')
    uploadedAt = serializers.DateTimeField(source='uploaded_at')

    class Meta:
        model = LabReport
        fields = ['id', 'reportId', 'patientId', 'doctorId', 'orderedBy', 'date', 'testType', 'name',
                  'testResults', 'normalRange', 'interpretation', 'recommendations', 'findings',
                  'instructions', 'status', 'pdfFileName', 'hasPdf', 'sequenceLabel', 'uploadedAt']

    def get_hasPdf(self, obj) -> bool:
        return bool(obj.pdf_locator)
