import bleach
from rest_framework import serializers

from nursing.models import Patient, PatientDocument, Visit


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class PatientRegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(min_value=0, max_value=150)
    gender = serializers.ChoiceField(choices=[g for g, _ in Patient.GENDER_CHOICES])
    contact = serializers.CharField(max_length=64)
    emergencyContact = serializers.CharField(required=False, allow_blank=True, max_length=64)
    address = serializers.CharField(required=False, allow_blank=True)
    medicalHistory = serializers.CharField(required=False, allow_blank=True)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_contact(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Contact is required')
        return v

    def validate_emergencyContact(self, v):
        return _clean(v)

    def validate_address(self, v):
        return _clean(v)

    def validate_medicalHistory(self, v):
        return _clean(v)


class VisitInputSerializer(serializers.Serializer):
    weight = serializers.FloatField(min_value=0.1)
    height = serializers.FloatField(min_value=1)
    BP = serializers.CharField(max_length=20)
    heartRate = serializers.IntegerField(min_value=0)
    temperature = serializers.FloatField()
    chiefComplaint = serializers.CharField(required=False, allow_blank=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True)

    def to_internal_value(self, data):
        # older clients send "bp" or "bloodPressure"
        if hasattr(data, 'get') and 'BP' not in data:
            bp = data.get('bp') or data.get('bloodPressure')
            if bp is not None:
                data = {**data, 'BP': bp}
        return super().to_internal_value(data)

    def validate_chiefComplaint(self, v):
        return _clean(v)

    def validate_notes(self, v):
        return _clean(v)


class AddVisitSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    visit = VisitInputSerializer()


class RenameDocumentSerializer(serializers.Serializer):
    newName = serializers.CharField(max_length=255, allow_blank=True)

    def validate_newName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Invalid document name')
        return v


class VisitSerializer(serializers.ModelSerializer):
    BP = serializers.CharField(source='blood_pressure')
    heartRate = serializers.IntegerField(source='heart_rate')
    chiefComplaint = serializers.CharField(source='chief_complaint')
    bmiCategory = serializers.CharField(source='bmi_category')

    class Meta:
        model = Visit
        fields = ['id', 'date', 'weight', 'height', 'BP', 'heartRate', 'temperature',
                  'chiefComplaint', 'bmi', 'bmiCategory', 'notes']


class DocumentSerializer(serializers.ModelSerializer):
    contentType = serializers.CharField(source='content_type')
    uploadDate = serializers.DateTimeField(source='uploaded_at')
    uploadedBy = serializers.CharField(source='uploaded_by.nurse_id', default=None)

    class Meta:
        model = PatientDocument
        fields = ['id', 'name', 'contentType', 'uploadDate', 'uploadedBy']


class PatientSerializer(serializers.ModelSerializer):
    """Patient as returned to clients; blob handles are never exposed."""
    patientId = serializers.CharField(source='patient_id', read_only=True)
    emergencyContact = serializers.CharField(source='emergency_contact')
    medicalHistory = serializers.CharField(source='medical_history')
    isActive = serializers.BooleanField(source='is_active')
    hasPhoto = serializers.SerializerMethodField()
    hasIdProof = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at')
    updatedAt = serializers.DateTimeField(source='updated_at')

    class Meta:
        model = Patient
        fields = ['id', 'patientId', 'name', 'age', 'gender', 'contact', 'emergencyContact', 'address',
                  'medicalHistory', 'isActive', 'hasPhoto', 'hasIdProof', 'createdAt', 'updatedAt']

    def get_hasPhoto(self, obj) -> bool:
        return bool(obj.photo_handle)

    def get_hasIdProof(self, obj) -> bool:
        return bool(obj.id_proof_handle)


class PatientDetailSerializer(PatientSerializer):
    visits = VisitSerializer(many=True, read_only=True)
    documents = DocumentSerializer(many=True, read_only=True)

    class Meta(PatientSerializer.Meta):
        fields = PatientSerializer.Meta.fields + ['visits', 'documents']


class PatientListQuerySerializer(serializers.Serializer):
    q = serializers.CharField(required=False, allow_blank=True)
    active = serializers.BooleanField(required=False, allow_null=True)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)
