"""Order domain constants.

Defines status choices, delivery types and the transition table of the
order state machine.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    NUEVO = "nuevo", "Nuevo"
    PREPARACION = "preparacion", "En preparación"
    LISTO = "listo", "Listo"
    ENTREGADO = "entregado", "Entregado"
    CANCELADO = "cancelado", "Cancelado"


class DeliveryType(models.TextChoices):
    RETIRO = "retiro", "Retira en local"
    ENVIO = "envio", "Envío a domicilio"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.NUEVO: {OrderStatus.PREPARACION, OrderStatus.CANCELADO},
    OrderStatus.PREPARACION: {OrderStatus.LISTO, OrderStatus.CANCELADO},
    OrderStatus.LISTO: {OrderStatus.ENTREGADO, OrderStatus.CANCELADO},
    OrderStatus.ENTREGADO: set(),
    # Reactivation is the only way out of a terminal state.
    OrderStatus.CANCELADO: {OrderStatus.NUEVO},
}

NEXT_STATUS: dict[str, str] = {
    OrderStatus.NUEVO: OrderStatus.PREPARACION,
    OrderStatus.PREPARACION: OrderStatus.LISTO,
    OrderStatus.LISTO: OrderStatus.ENTREGADO,
}

TERMINAL_STATES: set[str] = {OrderStatus.ENTREGADO, OrderStatus.CANCELADO}

# Shown on the kitchen screen, in this order.
KITCHEN_STATUSES: tuple[str, ...] = (
    OrderStatus.NUEVO,
    OrderStatus.PREPARACION,
    OrderStatus.LISTO,
)

PICKUP_ADDRESS = "Retira en Local"

ORDER_NUMBER_MAX_RETRIES = 5

# Largest amount the order and line price columns can hold (10 digits, 2 decimals).
MAX_AMOUNT = Decimal("99999999.99")
