from rest_framework.permissions import BasePermission

from modules.delivery.models import DeliveryPerson


class IsDriver(BasePermission):
    """Allow only requests authenticated by a driver session."""

    message = "Se requiere una sesión de repartidor."

    def has_permission(self, request, view) -> bool:
        return isinstance(request.user, DeliveryPerson)
