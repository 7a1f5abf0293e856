from django.core.management.base import BaseCommand
from django.utils import timezone
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

from clinic.services import dashboard
from clinic.services.broadcast import UPDATES_GROUP


class Command(BaseCommand):
    help = "Warm the admin dashboard cache; broadcast WebSocket refresh event."

    def handle(self, *args, **options):
        now = timezone.now()
        dashboard.get_summary(refresh=True)
        keys_refreshed = [dashboard.CACHE_KEY]

        channel_layer = get_channel_layer()
        if channel_layer is not None:
            event = {"type": "broadcast.refresh", "version": int(now.timestamp()), "ts": now.isoformat(),
                     "keys": keys_refreshed}
            async_to_sync(channel_layer.group_send)(UPDATES_GROUP, event)

        self.stdout.write(self.style.SUCCESS(f"Refreshed {len(keys_refreshed)} keys at {now}"))
