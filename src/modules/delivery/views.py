"""Delivery API views.

- ``DeliveryPersonViewSet``: driver maintenance for staff.
- ``DriverDeliveryViewSet``: the driver dashboard.  Login issues the
  ``driver_session`` cookie; every other action is authenticated by it.
"""

from __future__ import annotations

from django.conf import settings
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.cache import CachedView, get_or_build, schedule_invalidation, view_cache_key
from modules.core.validation import pydantic_errors
from modules.delivery.authentication import (
    DriverSessionAuthentication,
    issue_session_token,
)
from modules.delivery.dtos import (
    CreateDeliveryPersonDTO,
    DriverLoginDTO,
    UpdateDeliveryPersonDTO,
)
from modules.delivery.exceptions import (
    DeliveryPersonAlreadyExists,
    DeliveryPersonNotFound,
    InvalidCredentials,
)
from modules.delivery.permissions import IsDriver
from modules.delivery.repositories.django_repository import (
    DeliveryPersonDjangoRepository,
)
from modules.delivery.serializers import DeliveryPersonSerializer
from modules.delivery.services import DeliveryPersonService
from modules.orders.exceptions import (
    DriverNotAssigned,
    InvalidOrderStatus,
    OrderNotFound,
    OrderStatusConflict,
)
from modules.orders.serializers import OrderListSerializer, OrderSerializer
from modules.orders.views import ORDER_NOT_FOUND, build_order_service

DRIVER_NOT_FOUND = {"detail": "Delivery person not found."}


def _invalid(exc: PydanticValidationError) -> Response:
    return Response(
        {"detail": "Invalid request body.", "errors": pydantic_errors(exc)},
        status=status.HTTP_400_BAD_REQUEST,
    )


def _body(request: Request, dto_class) -> dict:
    data = request.data
    return {field: data[field] for field in dto_class.model_fields if field in data}


class DeliveryPersonViewSet(GenericViewSet):
    """CRUD for drivers (staff)."""

    serializer_class = DeliveryPersonSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = DeliveryPersonService(repository=DeliveryPersonDjangoRepository())

    def list(self, request: Request) -> Response:
        """GET /api/v1/delivery-people/"""
        drivers = self._service.list_delivery_people()
        return Response(DeliveryPersonSerializer(drivers, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        try:
            driver = self._service.get_delivery_person(str(pk))
        except DeliveryPersonNotFound:
            return Response(DRIVER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(DeliveryPersonSerializer(driver).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/delivery-people/  ``{"name", "password"}``"""
        try:
            dto = CreateDeliveryPersonDTO(**_body(request, CreateDeliveryPersonDTO))
        except PydanticValidationError as exc:
            return _invalid(exc)
        try:
            driver = self._service.create_delivery_person(dto)
        except DeliveryPersonAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(
            DeliveryPersonSerializer(driver).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        try:
            dto = UpdateDeliveryPersonDTO(**_body(request, UpdateDeliveryPersonDTO))
        except PydanticValidationError as exc:
            return _invalid(exc)
        try:
            driver = self._service.update_delivery_person(str(pk), dto)
        except DeliveryPersonNotFound:
            return Response(DRIVER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except DeliveryPersonAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(DeliveryPersonSerializer(driver).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        try:
            self._service.delete_delivery_person(str(pk))
        except DeliveryPersonNotFound:
            return Response(DRIVER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DriverDeliveryViewSet(GenericViewSet):
    """Driver dashboard: own ready orders and marking them delivered."""

    authentication_classes = [DriverSessionAuthentication]
    permission_classes = [IsDriver]
    serializer_class = OrderListSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._orders = build_order_service()

    def get_throttles(self):
        self.throttle_scope = "driver_login" if self.action == "login" else None
        return super().get_throttles()

    @action(
        detail=False,
        methods=["post"],
        authentication_classes=[],
        permission_classes=[AllowAny],
    )
    def login(self, request: Request) -> Response:
        """POST /api/v1/deliveries/login/  ``{"name", "password"}``

        Sets the ``driver_session`` cookie on success.
        """
        try:
            dto = DriverLoginDTO(**_body(request, DriverLoginDTO))
        except PydanticValidationError as exc:
            return _invalid(exc)

        service = DeliveryPersonService(repository=DeliveryPersonDjangoRepository())
        try:
            driver = service.authenticate(dto)
        except InvalidCredentials as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_401_UNAUTHORIZED)

        response = Response(DeliveryPersonSerializer(driver).data)
        response.set_cookie(
            settings.DRIVER_SESSION_COOKIE,
            issue_session_token(driver),
            max_age=int(settings.DRIVER_SESSION_LIFETIME.total_seconds()),
            httponly=True,
            secure=not settings.DEBUG,
            samesite="Lax",
        )
        return response

    @action(
        detail=False,
        methods=["post"],
        authentication_classes=[],
        permission_classes=[AllowAny],
    )
    def logout(self, request: Request) -> Response:
        """POST /api/v1/deliveries/logout/"""
        response = Response(status=status.HTTP_204_NO_CONTENT)
        response.delete_cookie(settings.DRIVER_SESSION_COOKIE, samesite="Lax")
        return response

    def list(self, request: Request) -> Response:
        """GET /api/v1/deliveries/

        Ready orders assigned to the logged-in driver.
        """
        driver_id = str(request.user.id)
        data = get_or_build(
            view_cache_key(CachedView.DRIVERS, driver_id),
            lambda: OrderListSerializer(
                self._orders.driver_orders(driver_id), many=True
            ).data,
        )
        return Response(data)

    @action(detail=True, methods=["post"])
    def deliver(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/deliveries/{pk}/deliver/"""
        try:
            mutation = self._orders.deliver_order(str(pk), str(request.user.id))
        except OrderNotFound:
            return Response(ORDER_NOT_FOUND, status=status.HTTP_404_NOT_FOUND)
        except DriverNotAssigned as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)
        except InvalidOrderStatus as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        except OrderStatusConflict as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        schedule_invalidation(mutation.affected_views)
        return Response(OrderSerializer(mutation.order).data)
