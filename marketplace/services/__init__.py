"""
Marketplace Service Layer

Shared result type and base class for the domain services that live in each
bounded context (cart, ordering, boutique, analytics).

Usage:
    from marketplace.services import ServiceResult, service_ok, service_err

    result = order_service.cancel_order(order_id, user)
    if result.ok:
        order = result.value
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, parse_uuid, service_err, service_ok

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    "parse_uuid",
    # Error codes
    "ErrorCodes",
]
