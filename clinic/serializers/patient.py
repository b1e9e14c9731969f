import bleach
from rest_framework import serializers

from clinic.models import Patient


def _clean(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class PatientSerializer(serializers.Serializer):
    firstName = serializers.CharField(max_length=100)
    middleName = serializers.CharField(max_length=100, required=False, allow_blank=True)
    lastName = serializers.CharField(max_length=100)
    dateOfBirth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=Patient.GENDER_CHOICES, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)
    county = serializers.CharField(max_length=100, required=False, allow_blank=True)
    subcounty = serializers.CharField(max_length=100, required=False, allow_blank=True)
    ward = serializers.CharField(max_length=100, required=False, allow_blank=True)
    idType = serializers.CharField(max_length=30, required=False, allow_blank=True)
    idNumber = serializers.CharField(max_length=50, required=False, allow_blank=True)
    nextOfKinName = serializers.CharField(max_length=200, required=False, allow_blank=True)
    nextOfKinPhone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    nextOfKinRelationship = serializers.CharField(max_length=50, required=False, allow_blank=True)
    bloodGroup = serializers.CharField(max_length=5, required=False, allow_blank=True)
    allergies = serializers.CharField(required=False, allow_blank=True)
    medicalHistory = serializers.CharField(required=False, allow_blank=True)

    def validate_firstName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('First name is required')
        return v

    def validate_lastName(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Last name is required')
        return v

    def validate_middleName(self, v):
        return _clean(v)

    def validate_phone(self, v):
        return _clean(v)


class PatientListQuerySerializer(serializers.Serializer):
    search = serializers.CharField(max_length=64, required=False, allow_blank=True)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=500, required=False)


class DepartmentSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    headId = serializers.IntegerField(required=False, allow_null=True)
    isActive = serializers.BooleanField(required=False)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Department name is required')
        return v
