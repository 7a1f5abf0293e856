from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.permissions import IsAdminRole
from clinic.serializers.inventory import InventoryItemSerializer
from clinic.services import dashboard, inventory
from clinic.services.audit import safe_log_action


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def inventory_items(request):
    if request.method == 'GET':
        listing = inventory.list_items()
        return Response({'ok': True, 'data': listing['items'], 'lowStockCount': listing['lowStockCount']})

    s = InventoryItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    item = inventory.create_item(s.validated_data)
    dashboard.invalidate()
    safe_log_action(user=request.user, action='inventory_create', object_type='inventory_item', object_id=item.id,
                    detail={'name': item.name, 'stock': str(item.stock)})
    return Response({'ok': True, 'data': inventory.serialize(item)}, status=201)


@api_view(['PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def inventory_item_detail(request, item_id):
    if request.method == 'DELETE':
        inventory.delete_item(item_id)
        dashboard.invalidate()
        safe_log_action(user=request.user, action='inventory_delete', object_type='inventory_item', object_id=item_id)
        return Response({'ok': True})

    s = InventoryItemSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    item = inventory.update_item(item_id, s.validated_data)
    dashboard.invalidate()
    safe_log_action(user=request.user, action='inventory_update', object_type='inventory_item', object_id=item.id,
                    detail={'fields': sorted(s.validated_data)})
    return Response({'ok': True, 'data': inventory.serialize(item)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def inventory_alerts(request):
    return Response({'ok': True, 'data': inventory.alerts()})
