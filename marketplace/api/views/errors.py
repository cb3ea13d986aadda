"""
Mapping of service error codes to HTTP responses.

Not-owner results are rendered exactly like the matching not-found result so a
caller cannot probe for the existence of other users' orders or boutiques.
"""

from rest_framework import status
from rest_framework.response import Response

from marketplace.services import ErrorCodes, ServiceResult

ERROR_STATUS = {
    # Validation
    ErrorCodes.INVALID_QUANTITY: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.INVALID_PERIOD: status.HTTP_400_BAD_REQUEST,
    ErrorCodes.CART_EMPTY: status.HTTP_400_BAD_REQUEST,
    # Not found / not authorized
    ErrorCodes.PRODUCT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.BOUTIQUE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.TEMPLATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.SELLER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCodes.ITEM_NOT_IN_CART: status.HTTP_404_NOT_FOUND,
    ErrorCodes.NOT_ORDER_OWNER: status.HTTP_404_NOT_FOUND,
    ErrorCodes.NOT_BOUTIQUE_OWNER: status.HTTP_404_NOT_FOUND,
    # Conflict / state
    ErrorCodes.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    ErrorCodes.ALREADY_OWNS_BOUTIQUE: status.HTTP_409_CONFLICT,
    ErrorCodes.GRADE_INSUFFICIENT: status.HTTP_409_CONFLICT,
    ErrorCodes.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
    # Consistency
    ErrorCodes.DATA_INTEGRITY_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Codes whose message would reveal whether the resource exists
OPAQUE_NOT_FOUND = {
    ErrorCodes.ORDER_NOT_FOUND: (ErrorCodes.ORDER_NOT_FOUND, "Order not found"),
    ErrorCodes.NOT_ORDER_OWNER: (ErrorCodes.ORDER_NOT_FOUND, "Order not found"),
    ErrorCodes.BOUTIQUE_NOT_FOUND: (ErrorCodes.BOUTIQUE_NOT_FOUND, "Boutique not found"),
    ErrorCodes.NOT_BOUTIQUE_OWNER: (ErrorCodes.BOUTIQUE_NOT_FOUND, "Boutique not found"),
}


def error_response(result: ServiceResult) -> Response:
    """Build the error Response for a failed ServiceResult."""
    http_status = ERROR_STATUS.get(result.error, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if result.error in OPAQUE_NOT_FOUND:
        code, message = OPAQUE_NOT_FOUND[result.error]
        return Response({"error": code, "message": message}, status=http_status)

    body = {"error": result.error, "message": result.error_detail}
    if result.error_context:
        body["context"] = result.error_context
    return Response(body, status=http_status)


def validation_response(errors) -> Response:
    """Build the 400 Response for request serializer errors."""
    return Response(
        {"error": ErrorCodes.VALIDATION_ERROR, "message": "Invalid request", "context": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )
