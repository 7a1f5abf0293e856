"""
Vaccine inventory: CRUD plus low-stock and expiry flags.

An item is low on stock when ``stock <= low_stock_threshold`` and
expiring soon when its expiration date falls within
``INVENTORY_EXPIRY_WARNING_DAYS`` of today.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from clinic.exceptions import NotFound
from clinic.models import InventoryItem

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('name', 'description', 'stock', 'low_stock_threshold', 'doses_per_vial',
                   'expiration_date', 'status')


def normalize_stock(value) -> Decimal:
    """Round to cents and clamp at zero."""
    stock = Decimal(str(value or 0)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    return max(Decimal('0'), stock)


def flags(item: InventoryItem, today: date | None = None) -> dict:
    today = today or timezone.localdate()
    warn_until = today + timedelta(days=settings.INVENTORY_EXPIRY_WARNING_DAYS)
    exp = item.expiration_date
    return {
        'lowStock': item.stock <= item.low_stock_threshold,
        'expired': bool(exp and exp < today),
        'expiringSoon': bool(exp and today <= exp <= warn_until),
    }


def serialize(item: InventoryItem, today: date | None = None) -> dict:
    return {
        'id': str(item.id),
        'name': item.name,
        'description': item.description,
        'stock': float(item.stock),
        'lowStockThreshold': item.low_stock_threshold,
        'dosesPerVial': item.doses_per_vial,
        'expirationDate': item.expiration_date.isoformat() if item.expiration_date else None,
        'status': item.status,
        'createdAt': item.created_at.isoformat() if item.created_at else None,
        'updatedAt': item.updated_at.isoformat() if item.updated_at else None,
        **flags(item, today),
    }


def list_items() -> dict:
    today = timezone.localdate()
    items = [serialize(i, today) for i in InventoryItem.objects.order_by('name')]
    return {'items': items, 'lowStockCount': sum(1 for i in items if i['lowStock'])}


def low_stock_items():
    return InventoryItem.objects.filter(stock__lte=F('low_stock_threshold')).order_by('name')


def alerts() -> dict:
    today = timezone.localdate()
    warn_until = today + timedelta(days=settings.INVENTORY_EXPIRY_WARNING_DAYS)
    expiring = InventoryItem.objects.filter(expiration_date__isnull=False, expiration_date__lte=warn_until) \
        .order_by('expiration_date')
    return {
        'lowStock': [serialize(i, today) for i in low_stock_items()],
        'expiring': [serialize(i, today) for i in expiring],
    }


def create_item(data: dict) -> InventoryItem:
    data = dict(data)
    data['name'] = data['name'].strip()
    data['stock'] = normalize_stock(data.get('stock'))
    item = InventoryItem.objects.create(**data)
    logger.info("inventory item %s created (%s)", item.id, item.name)
    return item


def get_item(item_id) -> InventoryItem:
    item = InventoryItem.objects.filter(id=item_id).first()
    if item is None:
        raise NotFound("Inventory item not found")
    return item


def update_item(item_id, data: dict) -> InventoryItem:
    item = get_item(item_id)
    changed = []
    for field in EDITABLE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == 'name':
            value = value.strip()
        elif field == 'stock':
            value = normalize_stock(value)
        setattr(item, field, value)
        changed.append(field)
    if changed:
        item.save(update_fields=[*changed, 'updated_at'])
    return item


def delete_item(item_id) -> None:
    item = get_item(item_id)
    item.delete()
    logger.info("inventory item %s deleted", item_id)
