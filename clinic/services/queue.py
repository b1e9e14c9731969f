"""
Service queue: ticket numbering, status transitions and statistics.

A queue entry moves ``waiting -> called -> serving -> completed`` with
side exits to ``no-show``, ``rescheduled`` and ``cancelled``.  Nothing
advances on its own: every change is an explicit staff action that goes
through :func:`transition`.  Priority only affects display order.
"""
from __future__ import annotations

import logging
from datetime import datetime

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.db.models import Case, Count, IntegerField, Value, When
from django.utils import timezone

from clinic.exceptions import DomainError, DuplicateRecord, InvalidTransition
from clinic.models import Patient, QueueEntry, QueueTransition
from clinic.services.audit import log_action
from clinic.services.formatting import iso

logger = logging.getLogger(__name__)

TRANSITIONS: dict[str, tuple[str, ...]] = {
    'waiting': ('called', 'no-show', 'rescheduled', 'cancelled'),
    'called': ('serving', 'waiting', 'no-show', 'rescheduled', 'cancelled'),
    'serving': ('completed', 'cancelled'),
    'rescheduled': ('waiting', 'cancelled'),
    'completed': (),
    'no-show': (),
    'cancelled': (),
}
ACTIVE_STATUSES = ('waiting', 'called', 'serving')
OPEN_STATUSES = ACTIVE_STATUSES + ('rescheduled',)
FINISHED_STATUSES = ('completed', 'no-show', 'cancelled')

PRIORITY_RANK = {'emergency': 0, 'urgent': 1, 'normal': 2}
SERVICE_POINTS = [code for code, _ in QueueEntry.SERVICE_POINT_CHOICES]

QUEUE_GROUP = 'queue'
STATS_KEY = 'queue:stats:{}'


def can_transition(current: str, new: str) -> bool:
    """Return True if an entry may move from ``current`` to ``new``."""
    return new in TRANSITIONS.get(current, ())


def priority_ordering():
    """ORM expression ranking emergency before urgent before normal."""
    return Case(
        *[When(priority=p, then=Value(rank)) for p, rank in PRIORITY_RANK.items()],
        default=Value(len(PRIORITY_RANK)),
        output_field=IntegerField(),
    )


def next_ticket_number(service_point: str, day=None) -> str:
    """Ticket ``X-NNN``: service point initial and today's count at that point."""
    day = day or timezone.localdate()
    count = QueueEntry.objects.filter(service_point=service_point, arrival_time__date=day).count()
    return f"{service_point[:1].upper()}-{count + 1:03d}"


def wait_minutes(entry: QueueEntry, now: datetime | None = None) -> int:
    """Minutes between arrival and being called (or now while still waiting)."""
    end = entry.called_time or entry.start_time or entry.end_time or now or timezone.now()
    return max(int((end - entry.arrival_time).total_seconds() // 60), 0)


# ---------------------------------------------------------------------------
# In-memory list helpers (operate on formatted rows)
# ---------------------------------------------------------------------------
def sort_entries(rows: list[dict]) -> list[dict]:
    """Order rows by priority rank, then by arrival time."""
    return sorted(
        rows,
        key=lambda r: (PRIORITY_RANK.get(r.get('priority'), len(PRIORITY_RANK)), r.get('arrivalTime') or ''),
    )


def filter_entries(rows: list[dict], *, service_point: str | None = None, status: str | None = None,
                   priority: str | None = None, search: str | None = None) -> list[dict]:
    """Return the rows matching every given criterion; ``'all'`` disables a filter."""
    def keep(r: dict) -> bool:
        if service_point and service_point != 'all' and r.get('servicePoint') != service_point:
            return False
        if status and status != 'all' and r.get('status') != status:
            return False
        if priority and priority != 'all' and r.get('priority') != priority:
            return False
        if search:
            needle = search.strip().lower()
            haystack = ' '.join(
                str(r.get(k) or '') for k in ('patientName', 'patientNumber', 'ticketNumber', 'notes')
            ).lower()
            if needle not in haystack:
                return False
        return True

    return [r for r in rows if keep(r)]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------
def format_entry(entry: QueueEntry, now: datetime | None = None) -> dict:
    patient = entry.patient
    return {
        'queueId': entry.id,
        'patientId': patient.id,
        'patientName': patient.full_name,
        'patientNumber': patient.patient_number,
        'ticketNumber': entry.ticket_number,
        'servicePoint': entry.service_point,
        'priority': entry.priority,
        'status': entry.status,
        'estimatedWaitTime': entry.estimated_wait_minutes,
        'waitMinutes': wait_minutes(entry, now),
        'notes': entry.notes,
        'arrivalTime': iso(entry.arrival_time),
        'calledTime': iso(entry.called_time),
        'startTime': iso(entry.start_time),
        'endTime': iso(entry.end_time),
        'archived': entry.archived,
    }


def format_entry_detail(entry: QueueEntry) -> dict:
    data = format_entry(entry)
    data['allowedTransitions'] = list(TRANSITIONS.get(entry.status, ()))
    data['transitionHistory'] = [
        {
            'from': t.from_status,
            'to': t.to_status,
            'operator': t.operator.username if t.operator else '',
            'timestamp': iso(t.timestamp),
            'reason': t.reason,
        }
        for t in entry.transitions.select_related('operator').order_by('timestamp', 'id')
    ]
    return data


# ---------------------------------------------------------------------------
# Change notification
# ---------------------------------------------------------------------------
def invalidate_stats() -> None:
    cache.delete_many([STATS_KEY.format('all')] + [STATS_KEY.format(sp) for sp in SERVICE_POINTS])


def publish(event: str, entry: QueueEntry) -> None:
    """Drop cached stats and tell ``/ws/queue/`` listeners once the change commits."""
    invalidate_stats()
    payload = {
        'type': 'queue.update',
        'event': event,
        'queueId': entry.id,
        'servicePoint': entry.service_point,
        'status': entry.status,
        'ticketNumber': entry.ticket_number,
        'ts': timezone.now().isoformat(),
    }

    def send():
        channel_layer = get_channel_layer()
        if channel_layer is not None:
            async_to_sync(channel_layer.group_send)(QUEUE_GROUP, payload)

    transaction.on_commit(send)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------
def enqueue(*, patient: Patient, service_point: str, priority: str = 'normal', notes: str = '',
            estimated_wait: int | None = None, ticket_number: str | None = None, user=None) -> QueueEntry:
    """Place ``patient`` in the queue of ``service_point`` as a waiting entry."""
    if service_point not in SERVICE_POINTS:
        raise DomainError(f'unknown service point: {service_point}')
    if priority not in PRIORITY_RANK:
        raise DomainError(f'unknown priority: {priority}')
    with transaction.atomic():
        already = QueueEntry.objects.filter(
            patient=patient, service_point=service_point, status__in=OPEN_STATUSES, archived=False
        ).exists()
        if already:
            raise DuplicateRecord(f'patient is already queued at {service_point}')
        if estimated_wait is None:
            ahead = QueueEntry.objects.filter(
                service_point=service_point, status='waiting', archived=False
            ).count()
            estimated_wait = ahead * settings.QUEUE_MINUTES_PER_PATIENT
        entry = QueueEntry.objects.create(
            patient=patient,
            ticket_number=ticket_number or next_ticket_number(service_point),
            service_point=service_point,
            priority=priority,
            status='waiting',
            estimated_wait_minutes=estimated_wait,
            notes=notes or '',
            arrival_time=timezone.now(),
            created_by=user if getattr(user, 'is_authenticated', False) else None,
        )
        QueueTransition.objects.create(
            entry=entry,
            from_status=None,
            to_status='waiting',
            operator=entry.created_by,
            reason='queued',
        )
        publish('created', entry)
    logger.info('queued patient %s at %s as %s', patient.patient_number, service_point, entry.ticket_number)
    return entry


def transition(entry_id: int, new_status: str, *, user=None, reason: str = '') -> QueueEntry:
    """Move an entry to ``new_status`` under a row lock, recording the change."""
    if new_status not in TRANSITIONS:
        raise DomainError(f'unknown status: {new_status}')
    with transaction.atomic():
        entry = QueueEntry.objects.select_for_update().select_related('patient').get(id=entry_id)
        old_status = entry.status
        if not can_transition(old_status, new_status):
            raise InvalidTransition(f'cannot move from {old_status} to {new_status}')
        now = timezone.now()
        entry.status = new_status
        if new_status == 'called':
            entry.called_time = now
        elif new_status == 'serving':
            entry.start_time = now
        elif new_status in FINISHED_STATUSES:
            entry.end_time = now
        elif new_status == 'waiting':
            entry.called_time = None
            if old_status == 'rescheduled':
                # back of the line
                entry.arrival_time = now
        entry.save()
        operator = user if getattr(user, 'is_authenticated', False) else None
        QueueTransition.objects.create(
            entry=entry,
            from_status=old_status,
            to_status=new_status,
            operator=operator,
            reason=reason or 'status update',
        )
        log_action(user=operator, action='queue_status', object_type='queue_entry', object_id=entry.id,
                   detail={'from': old_status, 'to': new_status})
        publish('status', entry)
    logger.info('queue entry %s: %s -> %s', entry.ticket_number, old_status, new_status)
    return entry


def call_next(service_point: str, *, user=None) -> QueueEntry | None:
    """Call the highest priority, longest waiting entry at ``service_point``."""
    if service_point not in SERVICE_POINTS:
        raise DomainError(f'unknown service point: {service_point}')
    with transaction.atomic():
        candidate = (
            QueueEntry.objects.select_for_update()
            .filter(service_point=service_point, status='waiting', archived=False)
            .annotate(rank=priority_ordering())
            .order_by('rank', 'arrival_time', 'id')
            .first()
        )
        if candidate is None:
            return None
        return transition(candidate.id, 'called', user=user, reason='called next')


def archive(entry: QueueEntry) -> QueueEntry:
    if entry.status not in FINISHED_STATUSES:
        raise DomainError('only finished entries can be archived')
    entry.archived = True
    entry.save(update_fields=['archived', 'updated_at'])
    publish('archived', entry)
    return entry


def archive_finished(service_point: str | None = None) -> int:
    """Archive every finished entry, optionally at one service point."""
    qs = QueueEntry.objects.filter(status__in=FINISHED_STATUSES, archived=False)
    if service_point and service_point != 'all':
        qs = qs.filter(service_point=service_point)
    count = qs.update(archived=True, updated_at=timezone.now())
    invalidate_stats()
    logger.info('archived %s finished queue entries', count)
    return count


def queue_stats(service_point: str | None = None) -> dict:
    """Counts per status and service point plus average waits, cached briefly."""
    key = STATS_KEY.format(service_point or 'all')
    cached = cache.get(key)
    if cached is not None:
        return cached
    qs = QueueEntry.objects.filter(archived=False)
    if service_point:
        qs = qs.filter(service_point=service_point)
    by_status = {code: 0 for code in TRANSITIONS}
    for row in qs.values('status').annotate(n=Count('id')):
        by_status[row['status']] = row['n']
    by_point = {code: 0 for code in SERVICE_POINTS}
    for row in qs.filter(status__in=ACTIVE_STATUSES).values('service_point').annotate(n=Count('id')):
        by_point[row['service_point']] = row['n']
    by_priority = {code: 0 for code in PRIORITY_RANK}
    for row in qs.filter(status='waiting').values('priority').annotate(n=Count('id')):
        by_priority[row['priority']] = row['n']

    now = timezone.now()
    waiting = list(qs.filter(status='waiting').only('arrival_time', 'called_time', 'start_time', 'end_time'))
    served = list(qs.filter(status='completed', start_time__isnull=False, end_time__isnull=False)
                  .only('start_time', 'end_time'))
    avg_wait = round(sum(wait_minutes(e, now) for e in waiting) / len(waiting), 1) if waiting else 0
    avg_service = (
        round(sum((e.end_time - e.start_time).total_seconds() / 60 for e in served) / len(served), 1)
        if served else 0
    )
    payload = {
        'total': sum(by_status.values()),
        'byStatus': by_status,
        'activeByServicePoint': by_point,
        'waitingByPriority': by_priority,
        'averageWaitMinutes': avg_wait,
        'averageServiceMinutes': avg_service,
        'generatedAt': now.isoformat(),
    }
    cache.set(key, payload, settings.QUEUE_STATS_TTL)
    return payload
