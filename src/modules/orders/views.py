"""Order API views.

Exposes the ``OrderService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes — the view never swallows generic exceptions.
After every successful mutation the affected cached views are
scheduled for invalidation.
"""

from __future__ import annotations

from typing import Callable

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    MenuItemDjangoRepository,
)
from modules.core.cache import CachedView, get_or_build, schedule_invalidation, view_cache_key
from modules.core.pagination import StandardResultsSetPagination
from modules.delivery.repositories.django_repository import (
    DeliveryPersonDjangoRepository,
)
from modules.orders.dtos import OrderMutation
from modules.orders.exceptions import (
    InvalidOrderStatus,
    OrderNotFound,
    OrderStatusConflict,
    OrderValidationFailed,
)
from modules.orders.filters import OrderFilter
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    TransitionNotesSerializer,
    UpdateStatusSerializer,
)
from modules.orders.services import OrderService
from modules.orders.validation import OrderValidator

ORDER_NOT_FOUND = {"detail": "Order not found."}


def build_order_service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        validator=OrderValidator(
            menu_item_repository=MenuItemDjangoRepository(),
            category_repository=CategoryDjangoRepository(),
            delivery_person_repository=DeliveryPersonDjangoRepository(),
        ),
    )


def validation_failed_response(exc: OrderValidationFailed) -> Response:
    return Response(
        {"detail": "Invalid order.", "errors": exc.errors},
        status=status.HTTP_400_BAD_REQUEST,
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations (staff).

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet`` — all writes go through
    the service/repository layer.
    """

    filterset_class = OrderFilter
    search_fields = ["order_number", "customer_name", "customer_phone"]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    serializer_class = OrderSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()

    def get_queryset(self):
        return Order.objects.prefetch_related("items")

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttling scope per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "kitchen"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Supports idempotency via the ``Idempotency-Key`` header.
        Returns 200 if the key was already used, 201 for new orders.
        """
        if not isinstance(request.data, dict):
            return Response(
                {"detail": "Expected a JSON object."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            mutation = self._service.create_order(
                request.data,
                idempotency_key=request.headers.get("Idempotency-Key"),
                actor=_actor(request),
            )
        except OrderValidationFailed as exc:
            return validation_failed_response(exc)

        schedule_invalidation(mutation.affected_views)
        return Response(
            OrderSerializer(mutation.order).data,
            status=status.HTTP_200_OK if mutation.replayed else status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, status_in, delivery type/person, date and total
        ranges) is handled by ``OrderFilter``.  Results are paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())

        paginator = StandardResultsSetPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = OrderListSerializer(page, many=True)
        return paginator.get_paginated_response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._service.get_order(str(pk))
        except OrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def kitchen(self, request: Request) -> Response:
        """GET /api/v1/orders/kitchen/

        Open orders for the kitchen screen (cached until an order enters or
        leaves the queue).
        """
        data = get_or_build(
            view_cache_key(CachedView.KITCHEN),
            lambda: OrderListSerializer(self._service.kitchen_queue(), many=True).data,
        )
        return Response(data)

    # ------------------------------------------------------------------
    # Status changes
    # ------------------------------------------------------------------

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/orders/{pk}/  ``{"status": ..., "notes": ...}``"""
        serializer = UpdateStatusSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"detail": "Invalid status.", "errors": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data
        return self._transition(
            lambda: self._service.update_status(
                str(pk), data["status"], actor=_actor(request), notes=data["notes"]
            )
        )

    @action(detail=True, methods=["post"])
    def advance(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/advance/"""
        return self._transition(
            lambda: self._service.advance_order(str(pk), actor=_actor(request))
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/"""
        notes = _notes(request)
        return self._transition(
            lambda: self._service.cancel_order(str(pk), actor=_actor(request), notes=notes)
        )

    @action(detail=True, methods=["post"])
    def reactivate(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/reactivate/"""
        notes = _notes(request)
        return self._transition(
            lambda: self._service.reactivate_order(
                str(pk), actor=_actor(request), notes=notes
            )
        )

    def _transition(self, command: Callable[[], OrderMutation]) -> Response:
        try:
            mutation = command()
        except OrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except OrderStatusConflict as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        schedule_invalidation(mutation.affected_views)
        return Response(OrderSerializer(mutation.order).data)


def _actor(request: Request) -> str:
    user = getattr(request, "user", None)
    if user is None or not user.is_authenticated:
        return ""
    return user.get_username()


def _notes(request: Request) -> str:
    serializer = TransitionNotesSerializer(data=request.data or {})
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data["notes"]
