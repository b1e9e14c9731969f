"""Fixed asset register endpoints."""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Asset
from clinic.permissions import IsFinanceRole
from clinic.serializers.finance import AssetSerializer
from clinic.services import assets as asset_service
from clinic.views.common import get_or_404


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def assets(request):
    if request.method == 'GET':
        params = request.query_params
        qs = Asset.objects.all()
        if params.get('status') and params['status'] != 'all':
            qs = qs.filter(status=params['status'])
        if params.get('category') and params['category'] != 'all':
            qs = qs.filter(category=params['category'])
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(asset_name__icontains=term) | Q(asset_code__icontains=term) | Q(serial_number__icontains=term)
            )
        return Response([asset_service.format_asset(a) for a in qs.order_by('asset_code')])

    s = AssetSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    asset = asset_service.register_asset(s.validated_data)
    return Response(asset_service.format_asset(asset), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def asset_detail(request, pk: int):
    asset = get_or_404(Asset.objects.all(), pk, 'asset')
    if request.method == 'GET':
        return Response(asset_service.format_asset(asset))
    if request.method == 'PUT':
        s = AssetSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(asset_service.format_asset(asset_service.update_asset(asset, s.validated_data)))
    asset.delete()
    return Response({'message': 'Asset deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def asset_stats(request):
    return Response(asset_service.summary())
