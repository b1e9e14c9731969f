from rest_framework import serializers

from clinic.models import InventoryItem, StockTransaction
from clinic.services.inventory import ADJUSTMENT_TYPES, REASON_TO_TYPE


class InventoryItemSerializer(serializers.Serializer):
    itemCode = serializers.CharField(max_length=30, required=False, allow_blank=True)
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    unit = serializers.CharField(max_length=30, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=0, required=False)
    reorderLevel = serializers.IntegerField(min_value=0, required=False)
    unitPrice = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    supplier = serializers.CharField(max_length=255, required=False, allow_blank=True)
    batchNumber = serializers.CharField(max_length=100, required=False, allow_blank=True)
    expiryDate = serializers.DateField(required=False, allow_null=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=InventoryItem.STATUS_CHOICES, required=False)


class StockTransactionSerializer(serializers.Serializer):
    itemId = serializers.IntegerField(min_value=1)
    adjustmentType = serializers.ChoiceField(choices=ADJUSTMENT_TYPES)
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.ChoiceField(choices=sorted(REASON_TO_TYPE), required=False, allow_blank=True)
    transactionType = serializers.ChoiceField(choices=StockTransaction.TYPE_CHOICES, required=False)
    transactionDate = serializers.DateField(required=False)
    unitPrice = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)
    referenceType = serializers.CharField(max_length=50, required=False, allow_blank=True)
    referenceNumber = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class StockTransactionUpdateSerializer(serializers.Serializer):
    """Only descriptive fields; quantities are corrected by a new transaction."""
    referenceType = serializers.CharField(max_length=50, required=False, allow_blank=True)
    referenceNumber = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
