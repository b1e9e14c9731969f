from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.services import payables, queue, receivables


class Command(BaseCommand):
    help = "Flag overdue payables/receivables, rebuild queue stats and tell queue screens to refresh."

    def handle(self, *args, **options):
        now = timezone.now()
        overdue = payables.refresh_overdue() + receivables.refresh_overdue()

        queue.invalidate_stats()
        keys_refreshed = []
        for service_point in [None] + queue.SERVICE_POINTS:
            queue.queue_stats(service_point)
            keys_refreshed.append(queue.STATS_KEY.format(service_point or 'all'))

        channel_layer = get_channel_layer()
        if channel_layer is not None:
            event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(),
                     "keys": keys_refreshed}
            async_to_sync(channel_layer.group_send)(queue.QUEUE_GROUP, event)

        self.stdout.write(self.style.SUCCESS(
            f"Refreshed {len(keys_refreshed)} keys, {overdue} records now overdue, at {now}"
        ))
