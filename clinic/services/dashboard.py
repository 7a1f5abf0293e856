from django.conf import settings
from django.core.cache import cache

from clinic.models import Appointment, InventoryItem
from clinic.services import inventory, vaccinations

CACHE_KEY = 'dashboard:admin'


def build_summary() -> dict:
    items = list(InventoryItem.objects.order_by('name'))
    low = [i for i in items if i.is_low_stock]
    dist = vaccinations.dose_distribution()
    return {
        'appointmentsCount': Appointment.objects.count(),
        'inventoryCount': len(items),
        'lowStock': [inventory.serialize(i) for i in low],
        'inventoryChart': [
            {'name': i.name, 'stock': float(i.stock), 'threshold': i.low_stock_threshold} for i in items
        ],
        'doseDistribution': dist,
        'fullyVaccinated': dist['third'],
    }


def get_summary(*, refresh: bool = False) -> dict:
    if not refresh:
        cached = cache.get(CACHE_KEY)
        if cached is not None:
            return cached
    summary = build_summary()
    cache.set(CACHE_KEY, summary, settings.DASHBOARD_CACHE_SECONDS)
    return summary


def invalidate() -> None:
    cache.delete(CACHE_KEY)
