# foodiebot/core/exceptions.py
"""Domain errors raised by the services and translated to HTTP by the API layer."""
from fastapi import HTTPException, status


class FoodieBotError(Exception):
    """Base class for domain errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_http(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.message)


class OrderNotFound(FoodieBotError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class CustomerNotFound(FoodieBotError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, phone: str):
        super().__init__(f"Customer not found: {phone}")
        self.phone = phone


class MenuItemNotFound(FoodieBotError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, item_id):
        super().__init__(f"Menu item not found: {item_id}")
        self.item_id = item_id


class MenuItemUnavailable(FoodieBotError):
    def __init__(self, label):
        super().__init__(f"Menu item not found or unavailable: {label}")
        self.label = label


class DuplicateCustomer(FoodieBotError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, phone: str):
        super().__init__("Customer with this phone number already exists.")
        self.phone = phone


class OrderNotAwaitingConfirmation(FoodieBotError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, order_id: str, current_status: str):
        super().__init__(f"Order {order_id} is not awaiting confirmation (status: {current_status})")
        self.order_id = order_id
        self.current_status = current_status


class InvalidOrderStatus(FoodieBotError):
    def __init__(self, value: str):
        super().__init__(f"Invalid order status: {value}")
        self.value = value
