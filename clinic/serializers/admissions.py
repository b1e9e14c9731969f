from rest_framework import serializers

from clinic.models import Admission, Bed, Ward


class DiagnosisSerializer(serializers.Serializer):
    diagnosisCode = serializers.CharField(max_length=30, required=False, allow_blank=True)
    diagnosisDescription = serializers.CharField(max_length=255)
    diagnosisType = serializers.CharField(max_length=20, required=False, allow_blank=True)


class AdmissionSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    bedId = serializers.IntegerField(min_value=1)
    admittingDoctorId = serializers.IntegerField(required=False, allow_null=True)
    admissionDate = serializers.DateTimeField(required=False, allow_null=True)
    expectedDischargeDate = serializers.DateField(required=False, allow_null=True)
    admissionDiagnosis = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)
    admissionReason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    initialCondition = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    diagnoses = DiagnosisSerializer(many=True, required=False)


class AdmissionUpdateSerializer(AdmissionSerializer):
    patientId = None
    bedId = serializers.IntegerField(min_value=1, required=False)
    status = serializers.ChoiceField(choices=Admission.STATUS_CHOICES, required=False)
    dischargeDate = serializers.DateTimeField(required=False, allow_null=True)


class MaternityFieldsMixin(serializers.Serializer):
    gestationWeeks = serializers.IntegerField(min_value=0, max_value=45, required=False, allow_null=True)
    expectedDeliveryDate = serializers.DateField(required=False, allow_null=True)
    pregnancyNumber = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    previousPregnancies = serializers.IntegerField(min_value=0, required=False)
    previousDeliveries = serializers.IntegerField(min_value=0, required=False)
    previousComplications = serializers.CharField(required=False, allow_blank=True)
    bloodGroup = serializers.CharField(max_length=5, required=False, allow_blank=True)
    rhesusFactor = serializers.CharField(max_length=10, required=False, allow_blank=True)


class MaternityAdmissionSerializer(MaternityFieldsMixin, AdmissionSerializer):
    pass


class MaternityAdmissionUpdateSerializer(MaternityFieldsMixin, AdmissionUpdateSerializer):
    pass


class DischargeSerializer(serializers.Serializer):
    dischargeDate = serializers.DateTimeField(required=False, allow_null=True)


class NewbornSerializer(serializers.Serializer):
    gender = serializers.ChoiceField(choices=['Male', 'Female'])
    birthWeight = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0)
    apgarScore1Min = serializers.IntegerField(min_value=0, max_value=10, required=False, allow_null=True)
    apgarScore5Min = serializers.IntegerField(min_value=0, max_value=10, required=False, allow_null=True)
    healthStatus = serializers.CharField(max_length=30, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class DeliverySerializer(serializers.Serializer):
    admissionId = serializers.IntegerField(min_value=1)
    deliveryDate = serializers.DateTimeField(required=False, allow_null=True)
    deliveryType = serializers.CharField(max_length=30, required=False, allow_blank=True)
    deliveryMode = serializers.CharField(max_length=50, required=False, allow_blank=True)
    complications = serializers.CharField(required=False, allow_blank=True)
    maternalOutcome = serializers.CharField(max_length=50, required=False, allow_blank=True)
    assistedBy = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    newborns = NewbornSerializer(many=True, required=False)


class WardSerializer(serializers.Serializer):
    wardCode = serializers.CharField(max_length=20)
    wardName = serializers.CharField(max_length=255)
    wardType = serializers.ChoiceField(choices=Ward.TYPE_CHOICES, required=False)
    capacity = serializers.IntegerField(min_value=0, required=False)
    dailyRate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    isActive = serializers.BooleanField(required=False)


class BedSerializer(serializers.Serializer):
    wardId = serializers.IntegerField(min_value=1)
    bedNumber = serializers.CharField(max_length=20)
    bedType = serializers.CharField(max_length=30, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Bed.STATUS_CHOICES, required=False)
    isActive = serializers.BooleanField(required=False)
