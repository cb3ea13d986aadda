"""
ServiceResult, BaseService and the error codes shared by every marketplace service.

Expected business conditions (insufficient stock, wrong order state, missing
grade) are returned as failed results. Storage failures are not: they propagate
to the caller's generic error path.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

T = TypeVar("T")

# Largest quantity a PositiveIntegerField column holds on every supported backend
MAX_QUANTITY = 2147483647

# Upper bound of a BigAutoField primary key
MAX_BIG_ID = 9223372036854775807


@dataclass
class ServiceResult(Generic[T]):
    """
    A result type that encapsulates success or failure from service operations.

    Attributes:
        ok: True if operation succeeded, False otherwise
        value: The success value (present if ok=True)
        error: Error code (present if ok=False)
        error_detail: Human-readable error message (present if ok=False)
        error_context: Machine-readable detail the caller can act on, e.g. which
            cart line lacked stock (optional, only if ok=False)

    Examples:
        >>> result = service_ok(order)
        >>> if result.ok:
        ...     return Response(OrderSerializer(result.value).data, 201)

        >>> result = service_err("insufficient_stock", "Only 2 left", product_id="...", available=2)
        >>> print(result.error_context["available"])  # 2
    """

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_detail: Optional[str] = None
    error_context: Optional[Dict[str, Any]] = None


def service_ok(value: T) -> ServiceResult[T]:
    """
    Create a successful ServiceResult.

    Example:
        >>> return service_ok(order_record)
    """
    return ServiceResult(ok=True, value=value)


def service_err(error: str, error_detail: str = "", **context: Any) -> ServiceResult:
    """
    Create a failed ServiceResult.

    Args:
        error: Error code (e.g., "product_not_found", "invalid_quantity")
        error_detail: Human-readable error message
        **context: Extra detail stored in ``error_context``

    Example:
        >>> return service_err(ErrorCodes.ORDER_NOT_FOUND, f"Order {order_id} does not exist")
    """
    return ServiceResult(ok=False, error=error, error_detail=error_detail or error, error_context=context or None)


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator

    Usage:
        class OrderService(BaseService):
            def __init__(self, inventory_service=None):
                super().__init__()
                self.inventory_service = inventory_service or InventoryService()

            @BaseService.log_performance
            def cancel_order(self, order_id, user):
                ...
    """

    def __init__(self):
        """Initialize base service with logger."""
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time and the outcome of the call. Exceptions are logged
        and re-raised unchanged.
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms

                if isinstance(result, ServiceResult):
                    if result.ok:
                        self.logger.info(f"{method_name} completed successfully in {elapsed_time:.2f}ms")
                    else:
                        self.logger.warning(
                            f"{method_name} failed with error '{result.error}' in {elapsed_time:.2f}ms"
                        )
                else:
                    self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")

                return result

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


# Common error codes for marketplace services
class ErrorCodes:
    """Standard error codes used across marketplace services."""

    # Product errors
    PRODUCT_NOT_FOUND = "product_not_found"

    # Cart errors
    CART_EMPTY = "cart_empty"
    INVALID_QUANTITY = "invalid_quantity"
    ITEM_NOT_IN_CART = "item_not_in_cart"

    # Order errors
    ORDER_NOT_FOUND = "order_not_found"
    INVALID_TRANSITION = "invalid_transition"

    # Inventory errors
    INSUFFICIENT_STOCK = "insufficient_stock"

    # Boutique errors
    BOUTIQUE_NOT_FOUND = "boutique_not_found"
    TEMPLATE_NOT_FOUND = "template_not_found"
    SELLER_NOT_FOUND = "seller_not_found"
    ALREADY_OWNS_BOUTIQUE = "already_owns_boutique"
    GRADE_INSUFFICIENT = "grade_insufficient"

    # Permission errors
    NOT_ORDER_OWNER = "not_order_owner"
    NOT_BOUTIQUE_OWNER = "not_boutique_owner"

    # Validation errors
    VALIDATION_ERROR = "validation_error"
    INVALID_PERIOD = "invalid_period"

    # Consistency errors
    DATA_INTEGRITY_ERROR = "data_integrity_error"


def parse_uuid(value) -> Optional[uuid.UUID]:
    """Return ``value`` as a UUID, or None when it is not a valid identifier."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def parse_int_id(value) -> Optional[int]:
    """Return ``value`` as a positive integer primary key, or None when it is not one."""
    try:
        parsed = int(str(value))
    except (TypeError, ValueError):
        return None
    if parsed <= 0 or parsed > MAX_BIG_ID:
        return None
    return parsed
