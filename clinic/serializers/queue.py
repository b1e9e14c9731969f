from rest_framework import serializers

from clinic.models import QueueEntry


class QueueCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(min_value=1)
    servicePoint = serializers.ChoiceField(choices=QueueEntry.SERVICE_POINT_CHOICES)
    priority = serializers.ChoiceField(choices=QueueEntry.PRIORITY_CHOICES, required=False, default='normal')
    ticketNumber = serializers.CharField(max_length=20, required=False, allow_blank=True)
    estimatedWaitTime = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class QueueUpdateSerializer(serializers.Serializer):
    priority = serializers.ChoiceField(choices=QueueEntry.PRIORITY_CHOICES, required=False)
    estimatedWaitTime = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class QueueStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=QueueEntry.STATUS_CHOICES)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True)


class ServicePointSerializer(serializers.Serializer):
    servicePoint = serializers.ChoiceField(choices=QueueEntry.SERVICE_POINT_CHOICES)


class QueueListQuerySerializer(serializers.Serializer):
    servicePoint = serializers.CharField(required=False, allow_blank=True)
    status = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.CharField(required=False, allow_blank=True)
    search = serializers.CharField(max_length=64, required=False, allow_blank=True)
    includeCompleted = serializers.BooleanField(required=False, default=False)
    dateFrom = serializers.DateField(required=False)
    dateTo = serializers.DateField(required=False)
    page = serializers.IntegerField(min_value=1, required=False)
    limit = serializers.IntegerField(min_value=1, max_value=500, required=False)
