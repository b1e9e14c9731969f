from rest_framework import serializers

from clinic.models import Asset, CashTransaction, Payable, Receivable, ServiceCharge


class PositiveAmountMixin:
    def validate_amount(self, v):
        if v is None or v <= 0:
            raise serializers.ValidationError('Amount must be greater than 0')
        return v


class VendorSerializer(serializers.Serializer):
    vendorCode = serializers.CharField(max_length=30)
    vendorName = serializers.CharField(max_length=255)
    contactPerson = serializers.CharField(max_length=200, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PayableSerializer(serializers.Serializer):
    vendorId = serializers.IntegerField(min_value=1)
    invoiceNumber = serializers.CharField(max_length=50)
    invoiceDate = serializers.DateField()
    dueDate = serializers.DateField(required=False, allow_null=True)
    totalAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    status = serializers.ChoiceField(choices=Payable.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PaymentSerializer(PositiveAmountMixin, serializers.Serializer):
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    paymentDate = serializers.DateField(required=False, allow_null=True)


class ReceivableSerializer(serializers.Serializer):
    invoiceId = serializers.IntegerField(min_value=1)
    totalAmount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    dueDate = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Receivable.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ChargeSerializer(serializers.Serializer):
    chargeCode = serializers.CharField(max_length=30)
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    department = serializers.CharField(max_length=100, required=False, allow_blank=True)
    chargeType = serializers.CharField(max_length=50, required=False, allow_blank=True)
    cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ServiceCharge.STATUS_CHOICES, required=False)


class CashTransactionSerializer(PositiveAmountMixin, serializers.Serializer):
    transactionDate = serializers.DateField()
    transactionType = serializers.ChoiceField(choices=CashTransaction.TYPE_CHOICES)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    referenceNumber = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    referenceType = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    accountId = serializers.IntegerField(required=False, allow_null=True)
    cashRegister = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    handledBy = serializers.IntegerField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AssetSerializer(serializers.Serializer):
    assetCode = serializers.CharField(max_length=30, required=False, allow_blank=True)
    assetName = serializers.CharField(max_length=255)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    location = serializers.CharField(max_length=255, required=False, allow_blank=True)
    departmentId = serializers.IntegerField(required=False, allow_null=True)
    purchaseDate = serializers.DateField(required=False, allow_null=True)
    purchaseCost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0)
    currentValue = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False, allow_null=True)
    accumulatedDepreciation = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=0, required=False)
    depreciationMethod = serializers.CharField(max_length=30, required=False, allow_blank=True)
    usefulLifeYears = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    serialNumber = serializers.CharField(max_length=100, required=False, allow_blank=True)
    manufacturer = serializers.CharField(max_length=255, required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=Asset.STATUS_CHOICES, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
