from rest_framework import viewsets, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .models import Order, DispatchLog
from .serializers import (
    AssignOrderSerializer,
    AutoAssignSerializer,
    DispatchConfigSerializer,
    DispatchLogFilterSerializer,
    DispatchLogSerializer,
    DispatchZoneSerializer,
    OrderSerializer,
)
from .services import build_engine
from .stores import DjangoDispatchConfigStore, DjangoDispatchLogStore, DjangoZoneRegistry


def _assignment_payload(result):
    """
    {order, dispatchLog} rendered from the ORM rows the engine just wrote.
    """
    order = Order.objects.select_related('courier').get(pk=result.order.id)
    log = (
        DispatchLog.objects.select_related('order', 'courier', 'zone')
        .prefetch_related('search_attempts', 'assignment_attempts__courier')
        .filter(order=order)
        .first()
    )
    payload = {
        "success": result.success,
        "order": OrderSerializer(order).data,
        "dispatchLog": DispatchLogSerializer(log).data if log else None,
    }
    if result.zone is not None:
        payload["zone"] = DispatchZoneSerializer(result.zone).data
    if result.error:
        payload["error"] = result.error
    return payload


class DispatchConfigView(APIView):
    """
    GET: current config (created with defaults on first read).
    PUT: merge the given fields into the config (upsert).
    """
    def get(self, request):
        config = DjangoDispatchConfigStore().get()
        return Response(config.to_wire())

    def put(self, request):
        serializer = DispatchConfigSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        config = DjangoDispatchConfigStore().update(serializer.validated_data)
        return Response(config.to_wire())


class DispatchZoneViewSet(viewsets.ViewSet):
    """
    Zones go through the zone registry:
    - create refuses duplicate names (400)
    - list is sorted by name
    - update merges fields, 404 when the id is unknown
    """
    def list(self, request):
        zones = DjangoZoneRegistry().list()
        return Response(DispatchZoneSerializer(zones, many=True).data)

    def create(self, request):
        serializer = DispatchZoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        zone = DjangoZoneRegistry().create(**serializer.validated_data)
        return Response(DispatchZoneSerializer(zone).data, status=status.HTTP_201_CREATED)

    def update(self, request, pk=None):
        registry = DjangoZoneRegistry()
        registry.get(pk)  # 404 before validating the body
        serializer = DispatchZoneSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        zone = registry.update(pk, serializer.validated_data)
        return Response(DispatchZoneSerializer(zone).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)


class ManualAssignView(APIView):
    """
    Operator binds an order to a specific courier.
    404 if either is missing; nothing is written in that case.
    """
    def post(self, request):
        serializer = AssignOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = build_engine().manual_assign(
            serializer.validated_data['orderId'],
            serializer.validated_data['courierId'],
        )
        payload = _assignment_payload(result)
        payload.pop("success")
        return Response(payload)


class AutoAssignView(APIView):
    """
    Runs the widen-and-retry search for one order.
    "Nobody found" is a 200 with success=false, not an error.
    """
    def post(self, request):
        serializer = AutoAssignSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = build_engine().auto_assign(serializer.validated_data['orderId'])
        return Response(_assignment_payload(result))


class DispatchLogListView(APIView):
    """
    Newest-first audit log, filterable by status and (startDate AND endDate).
    """
    def get(self, request):
        filters = DispatchLogFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        logs = DjangoDispatchLogStore().queryset(
            status=filters.validated_data.get('status'),
            start=filters.validated_data.get('startDate'),
            end=filters.validated_data.get('endDate'),
        )
        return Response(DispatchLogSerializer(logs, many=True).data)
