from rest_framework import serializers

from clinic.models import Account


class AccountSerializer(serializers.Serializer):
    accountCode = serializers.CharField(max_length=30)
    accountName = serializers.CharField(max_length=255)
    accountType = serializers.ChoiceField(choices=Account.TYPE_CHOICES)
    parentAccountId = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    isActive = serializers.BooleanField(required=False)


class TransactionSerializer(serializers.Serializer):
    transactionDate = serializers.DateField()
    description = serializers.CharField(max_length=255)
    referenceNumber = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    referenceType = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    debitAccountId = serializers.IntegerField(min_value=1)
    creditAccountId = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def validate_amount(self, v):
        if v <= 0:
            raise serializers.ValidationError('Amount must be greater than 0')
        return v

    def validate(self, attrs):
        debit = attrs.get('debitAccountId')
        credit = attrs.get('creditAccountId')
        if debit is not None and debit == credit:
            raise serializers.ValidationError({'creditAccountId': 'Debit and credit accounts cannot be the same'})
        return attrs
