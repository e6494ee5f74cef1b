"""Catalog API views.

Exposes the ``CatalogService`` via HTTP using DRF ViewSets.
Domain exceptions are caught and translated into appropriate
HTTP status codes — the view never swallows generic exceptions.
Every successful mutation schedules invalidation of the menu and
statistics caches.
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.mixins import ListModelMixin
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.catalog.dtos import (
    CreateCategoryDTO,
    CreateMenuItemDTO,
    UpdateCategoryDTO,
    UpdateMenuItemDTO,
)
from modules.catalog.exceptions import (
    CategoryAlreadyExists,
    CategoryInUse,
    CategoryNotFound,
    InvalidCategory,
    InvalidMenuItem,
    MenuItemNotFound,
)
from modules.catalog.filters import MenuItemFilter
from modules.catalog.models import MenuItem
from modules.catalog.repositories.django_repository import (
    CategoryDjangoRepository,
    MenuItemDjangoRepository,
)
from modules.catalog.serializers import (
    AvailabilitySerializer,
    CategorySerializer,
    MenuItemSerializer,
)
from modules.catalog.services import CATALOG_AFFECTED_VIEWS, CatalogService
from modules.core.cache import CachedView, get_or_build, schedule_invalidation, view_cache_key
from modules.core.validation import pydantic_errors


def _build_service() -> CatalogService:
    return CatalogService(
        category_repository=CategoryDjangoRepository(),
        menu_item_repository=MenuItemDjangoRepository(),
    )


def _invalid(detail: str, errors: dict) -> Response:
    return Response(
        {"detail": detail, "errors": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )


class CategoryViewSet(GenericViewSet):
    """CRUD for categories (admin)."""

    serializer_class = CategorySerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def list(self, request: Request) -> Response:
        """GET /api/v1/categories/"""
        categories = self._service.list_categories()
        return Response(CategorySerializer(categories, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/categories/{pk}/"""
        try:
            category = self._service.get_category(str(pk))
        except CategoryNotFound:
            return Response(
                {"detail": "Category not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(CategorySerializer(category).data)

    def create(self, request: Request) -> Response:
        """POST /api/v1/categories/"""
        try:
            dto = CreateCategoryDTO(**_payload(request, CreateCategoryDTO))
        except PydanticValidationError as exc:
            return _invalid("Invalid category.", pydantic_errors(exc))

        try:
            category = self._service.create_category(dto)
        except CategoryAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except InvalidCategory as exc:
            return _invalid("Invalid category.", exc.errors)

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(
            CategorySerializer(category).data, status=status.HTTP_201_CREATED
        )

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/categories/{pk}/"""
        try:
            dto = UpdateCategoryDTO(**_payload(request, UpdateCategoryDTO))
        except PydanticValidationError as exc:
            return _invalid("Invalid category.", pydantic_errors(exc))

        try:
            category = self._service.update_category(str(pk), dto)
        except CategoryNotFound:
            return Response(
                {"detail": "Category not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except CategoryAlreadyExists as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        except (InvalidCategory, InvalidMenuItem) as exc:
            return _invalid(str(exc), exc.errors)

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(CategorySerializer(category).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/categories/{pk}/"""
        try:
            self._service.delete_category(str(pk))
        except CategoryNotFound:
            return Response(
                {"detail": "Category not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except CategoryInUse as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MenuItemViewSet(ListModelMixin, GenericViewSet):
    """ViewSet for menu items.

    Listing goes through the filter backends; the unfiltered first page
    is served from the ``home`` view cache.  All writes go through
    ``CatalogService``.
    """

    filterset_class = MenuItemFilter
    search_fields = ["name", "ingredients"]
    ordering_fields = ["name", "price_full", "category"]
    ordering = ["category", "name"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    serializer_class = MenuItemSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = _build_service()

    def get_queryset(self):
        return MenuItem.objects.alive()

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request, *args, **kwargs) -> Response:
        """GET /api/v1/menu-items/"""
        if request.query_params:
            return super().list(request, *args, **kwargs)
        data = get_or_build(
            view_cache_key(CachedView.HOME, "menu"),
            lambda: super(MenuItemViewSet, self).list(request, *args, **kwargs).data,
        )
        return Response(data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/menu-items/{pk}/"""
        try:
            item = self._service.get_menu_item(str(pk))
        except MenuItemNotFound:
            return Response(
                {"detail": "Menu item not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(MenuItemSerializer(item).data)

    # ------------------------------------------------------------------
    # Create / Update / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/menu-items/"""
        try:
            dto = CreateMenuItemDTO(**_payload(request, CreateMenuItemDTO))
        except PydanticValidationError as exc:
            return _invalid("Invalid menu item.", pydantic_errors(exc))

        try:
            item = self._service.create_menu_item(dto)
        except CategoryNotFound as exc:
            return _invalid(str(exc), {"category": [str(exc)]})
        except InvalidMenuItem as exc:
            return _invalid("Invalid menu item.", exc.errors)

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(MenuItemSerializer(item).data, status=status.HTTP_201_CREATED)

    def update(self, request: Request, pk: str | None = None) -> Response:
        """PUT/PATCH /api/v1/menu-items/{pk}/"""
        try:
            dto = UpdateMenuItemDTO(**_payload(request, UpdateMenuItemDTO))
        except PydanticValidationError as exc:
            return _invalid("Invalid menu item.", pydantic_errors(exc))

        try:
            item = self._service.update_menu_item(str(pk), dto)
        except MenuItemNotFound:
            return Response(
                {"detail": "Menu item not found."},
                status=status.HTTP_404_NOT_FOUND,
            )
        except CategoryNotFound as exc:
            return _invalid(str(exc), {"category": [str(exc)]})
        except InvalidMenuItem as exc:
            return _invalid("Invalid menu item.", exc.errors)

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(MenuItemSerializer(item).data)

    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        return self.update(request, pk)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/menu-items/{pk}/"""
        try:
            self._service.delete_menu_item(str(pk))
        except MenuItemNotFound:
            return Response(
                {"detail": "Menu item not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ------------------------------------------------------------------
    # Availability ("stock")
    # ------------------------------------------------------------------

    @action(detail=False, methods=["get", "patch"], url_path="stock")
    def stock(self, request: Request) -> Response:
        """GET/PATCH /api/v1/menu-items/stock/

        GET lists ``{id, name, available}`` for every item; PATCH accepts
        ``{"id": ..., "available": bool}`` and toggles one item.
        """
        if request.method == "GET":
            return Response(self._service.list_stock())

        serializer = AvailabilitySerializer(data=request.data)
        if not serializer.is_valid():
            return _invalid("Invalid request body.", serializer.errors)

        data = serializer.validated_data
        try:
            item = self._service.set_availability(str(data["id"]), data["available"])
        except MenuItemNotFound:
            return Response(
                {"detail": "Menu item not found."},
                status=status.HTTP_404_NOT_FOUND,
            )

        schedule_invalidation(CATALOG_AFFECTED_VIEWS)
        return Response(MenuItemSerializer(item).data)


def _payload(request: Request, dto_class) -> dict:
    """Pick the DTO's fields out of the request body, ignoring everything else."""
    data = request.data
    return {field: data[field] for field in dto_class.model_fields if field in data}
