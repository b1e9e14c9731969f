"""Fixed asset register."""
from __future__ import annotations

from decimal import Decimal

from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from clinic.exceptions import DuplicateRecord
from clinic.models import Asset
from clinic.services.formatting import iso, money
from clinic.services.numbering import next_sequential

_AMOUNT = DecimalField(max_digits=16, decimal_places=2)

ASSET_FIELDS = {
    'assetName': 'asset_name',
    'category': 'category',
    'location': 'location',
    'departmentId': 'department_id',
    'purchaseDate': 'purchase_date',
    'purchaseCost': 'purchase_cost',
    'currentValue': 'current_value',
    'accumulatedDepreciation': 'accumulated_depreciation',
    'depreciationMethod': 'depreciation_method',
    'usefulLifeYears': 'useful_life_years',
    'serialNumber': 'serial_number',
    'manufacturer': 'manufacturer',
    'status': 'status',
    'notes': 'notes',
}


def register_asset(data: dict) -> Asset:
    """Create an asset; the code is generated when not supplied."""
    with transaction.atomic():
        code = data.get('assetCode')
        if code:
            if Asset.objects.filter(asset_code=code).exists():
                raise DuplicateRecord('Asset code already exists')
        else:
            code = next_sequential(Asset, 'asset_code', 'AST-')
        fields = {m: data[a] for a, m in ASSET_FIELDS.items() if data.get(a) is not None}
        fields.setdefault('current_value', data['purchaseCost'])
        return Asset.objects.create(asset_code=code, **fields)


def update_asset(asset: Asset, data: dict) -> Asset:
    code = data.get('assetCode')
    if code and code != asset.asset_code:
        if Asset.objects.filter(asset_code=code).exclude(id=asset.id).exists():
            raise DuplicateRecord('Asset code already exists')
        asset.asset_code = code
    for a, m in ASSET_FIELDS.items():
        if a in data and data[a] is not None:
            setattr(asset, m, data[a])
    asset.save()
    return asset


def summary() -> dict:
    zero = Value(Decimal('0'))
    agg = Asset.objects.aggregate(
        totalAssets=Count('id'),
        totalPurchaseCost=Coalesce(Sum('purchase_cost'), zero, output_field=_AMOUNT),
        totalCurrentValue=Coalesce(Sum('current_value'), zero, output_field=_AMOUNT),
        totalDepreciation=Coalesce(Sum('accumulated_depreciation'), zero, output_field=_AMOUNT),
        activeCount=Count('id', filter=Q(status='active')),
        maintenanceCount=Count('id', filter=Q(status='maintenance')),
        retiredCount=Count('id', filter=Q(status='retired')),
        disposedCount=Count('id', filter=Q(status='disposed')),
    )
    return {k: (money(v) if isinstance(v, Decimal) else v) for k, v in agg.items()}


def format_asset(a: Asset) -> dict:
    return {
        'assetId': a.id,
        'assetCode': a.asset_code,
        'assetName': a.asset_name,
        'category': a.category,
        'location': a.location,
        'departmentId': a.department_id,
        'purchaseDate': iso(a.purchase_date),
        'purchaseCost': money(a.purchase_cost),
        'currentValue': money(a.current_value),
        'accumulatedDepreciation': money(a.accumulated_depreciation),
        'depreciationMethod': a.depreciation_method,
        'usefulLifeYears': a.useful_life_years,
        'serialNumber': a.serial_number,
        'manufacturer': a.manufacturer,
        'status': a.status,
        'notes': a.notes,
        'createdAt': iso(a.created_at),
    }
