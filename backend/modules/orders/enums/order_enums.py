from enum import Enum


class OrderStatus(str, Enum):
    NEW = "New"
    IN_PROGRESS = "In Progress"
    READY = "Ready"
    COMPLETED = "Completed"


# Orders that still occupy a table or a kitchen slot
OPEN_ORDER_STATUSES = (OrderStatus.NEW, OrderStatus.IN_PROGRESS, OrderStatus.READY)

# Orders with work left for the kitchen
KITCHEN_ORDER_STATUSES = (OrderStatus.NEW, OrderStatus.IN_PROGRESS)

# Orders shown on the expeditor screen
EXPO_ORDER_STATUSES = (OrderStatus.IN_PROGRESS, OrderStatus.READY)


class OrderType(str, Enum):
    DINE_IN = "dine-in"
    TAKEAWAY = "takeaway"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    OTHER = "other"
