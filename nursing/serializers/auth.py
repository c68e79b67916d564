import bleach
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from nursing.models import Nurse


class SignupSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)
    role = serializers.ChoiceField(choices=[r for r, _ in Nurse.ROLE_CHOICES], default=Nurse.ROLE_STAFF)
    department = serializers.ChoiceField(choices=[d for d, _ in Nurse.DEPARTMENT_CHOICES])

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_email(self, v):
        v = Nurse.objects.normalize_email((v or '').strip()).lower()
        if Nurse.objects.filter(email__iexact=v).exists():
            raise serializers.ValidationError('Nurse already registered')
        return v

    def validate_password(self, v):
        try:
            validate_password(v)
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return v


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField()

    def validate_email(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Email is required')
        return v

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v


class StatusSerializer(serializers.Serializer):
    status = serializers.CharField()

    def validate_status(self, v):
        # accept any case: "active", "INACTIVE" ...
        normalized = (v or '').strip().capitalize()
        if normalized not in (Nurse.STATUS_ACTIVE, Nurse.STATUS_INACTIVE):
            raise serializers.ValidationError("Invalid status. Allowed values are 'Active' or 'Inactive'.")
        return normalized


def nurse_summary(nurse: Nurse) -> dict:
    return {
        'id': nurse.id,
        'nurseId': nurse.nurse_id,
        'name': nurse.name,
        'email': nurse.email,
        'role': nurse.role,
        'department': nurse.department,
        'status': nurse.status,
    }
