"""Public colour contrast and palette endpoints."""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.services import theme


def _colour(params, key: str, default: str | None = None) -> str:
    value = params.get(key) or default
    if not value:
        raise ValidationError({key: 'This field is required.'})
    try:
        theme.hex_to_rgb(value)
    except ValueError as e:
        raise ValidationError({key: str(e)})
    return value


@api_view(['GET'])
@permission_classes([AllowAny])
def contrast(request):
    fg = _colour(request.query_params, 'foreground')
    bg = _colour(request.query_params, 'background', '#ffffff')
    return Response(theme.check_contrast(fg, bg))


@api_view(['GET'])
@permission_classes([AllowAny])
def palettes(request):
    base = _colour(request.query_params, 'base')
    return Response({'base': theme.rgb_to_hex(*theme.hex_to_rgb(base)),
                     'variants': theme.variants(base),
                     'palettes': theme.palettes(base)})
