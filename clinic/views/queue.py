"""
Service queue endpoints.

Every signed-in staff member may work the queue.  Status changes go
through :func:`clinic.services.queue.transition`, which enforces the
transition table, stamps the timestamps and records the history.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Patient, QueueEntry
from clinic.serializers.queue import (
    QueueCreateSerializer,
    QueueListQuerySerializer,
    QueueStatusSerializer,
    QueueUpdateSerializer,
    ServicePointSerializer,
)
from clinic.services import queue as queue_service
from clinic.services.formatting import page_window
from clinic.views.common import get_or_404


def _entries():
    return QueueEntry.objects.select_related('patient')


def _query(request) -> dict:
    q = QueueListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    return q.validated_data


def _rows(qs, vd: dict) -> list[dict]:
    if vd.get('dateFrom'):
        qs = qs.filter(arrival_time__date__gte=vd['dateFrom'])
    if vd.get('dateTo'):
        qs = qs.filter(arrival_time__date__lte=vd['dateTo'])
    rows = [queue_service.format_entry(e) for e in qs]
    rows = queue_service.filter_entries(
        rows,
        service_point=vd.get('servicePoint'),
        status=vd.get('status'),
        priority=vd.get('priority'),
        search=vd.get('search'),
    )
    return rows


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def queue_entries(request):
    if request.method == 'GET':
        vd = _query(request)
        qs = _entries().filter(archived=False)
        if not vd.get('includeCompleted'):
            qs = qs.filter(status__in=queue_service.OPEN_STATUSES)
        rows = queue_service.sort_entries(_rows(qs, vd))
        offset, limit = page_window(request.query_params)
        return Response(rows[offset:offset + limit])

    s = QueueCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    patient = Patient.objects.filter(id=vd['patientId'], voided=False).first()
    if patient is None:
        raise ValidationError({'patientId': 'patient not found'})
    entry = queue_service.enqueue(
        patient=patient,
        service_point=vd['servicePoint'],
        priority=vd.get('priority') or 'normal',
        notes=vd.get('notes') or '',
        estimated_wait=vd.get('estimatedWaitTime'),
        ticket_number=vd.get('ticketNumber') or None,
        user=request.user,
    )
    return Response(queue_service.format_entry(entry), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def queue_entry_detail(request, pk: int):
    entry = get_or_404(_entries(), pk, 'queue entry')
    if request.method == 'GET':
        return Response(queue_service.format_entry_detail(entry))
    if request.method == 'PUT':
        s = QueueUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        if 'priority' in vd:
            entry.priority = vd['priority']
        if 'notes' in vd:
            entry.notes = vd['notes']
        if 'estimatedWaitTime' in vd:
            entry.estimated_wait_minutes = vd['estimatedWaitTime']
        entry.save()
        queue_service.publish('updated', entry)
        return Response(queue_service.format_entry(entry))
    entry_id = entry.id
    queue_service.publish('deleted', entry)
    entry.delete()
    return Response({'message': 'Queue entry deleted successfully', 'queueId': entry_id})


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def queue_entry_status(request, pk: int):
    get_or_404(QueueEntry.objects.all(), pk, 'queue entry')
    s = QueueStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = queue_service.transition(
        pk, s.validated_data['status'], user=request.user, reason=s.validated_data.get('reason') or '',
    )
    return Response(queue_service.format_entry(entry))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def queue_call_next(request):
    s = ServicePointSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    entry = queue_service.call_next(s.validated_data['servicePoint'], user=request.user)
    if entry is None:
        return Response({'ok': False, 'error': {'code': 'queue_empty',
                                                'message': 'No patients waiting'}}, status=404)
    return Response(queue_service.format_entry(entry))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def queue_entry_archive(request, pk: int):
    entry = get_or_404(_entries(), pk, 'queue entry')
    entry = queue_service.archive(entry)
    return Response({'message': 'Queue entry archived successfully', 'queueId': entry.id})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def queue_archive_completed(request):
    service_point = request.data.get('servicePoint') or request.query_params.get('servicePoint')
    count = queue_service.archive_finished(service_point)
    return Response({'message': f'Archived {count} queue entries', 'count': count})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_history(request):
    """Archived and finished entries, newest first."""
    qs = _entries().filter(status__in=queue_service.FINISHED_STATUSES).order_by('-arrival_time', '-id')
    rows = _rows(qs, _query(request))
    offset, limit = page_window(request.query_params)
    return Response(rows[offset:offset + limit])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def queue_stats(request):
    service_point = request.query_params.get('servicePoint')
    if service_point and service_point not in queue_service.SERVICE_POINTS:
        raise ValidationError({'servicePoint': f'unknown service point: {service_point}'})
    return Response(queue_service.queue_stats(service_point or None))
