import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from dispatch.errors import (
    CourierNotFound,
    DispatchError,
    DuplicateZone,
    InvalidDispatchConfig,
    InvalidZone,
    OrderNotFound,
    ZoneNotFound,
)

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS = (OrderNotFound, CourierNotFound, ZoneNotFound)
CLIENT_ERRORS = (DuplicateZone, InvalidZone, InvalidDispatchConfig)


def dispatch_exception_handler(exc, context):
    """
    REST_FRAMEWORK['EXCEPTION_HANDLER'].
    - not-found domain errors -> 404
    - duplicate / invalid domain errors -> 400
    - anything DRF already knows (validation, Http404, ...) -> DRF default
    - everything else -> 500 with a generic message, logged with traceback
    """
    if isinstance(exc, NOT_FOUND_ERRORS):
        return Response({"message": str(exc)}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, CLIENT_ERRORS):
        return Response({"message": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.error("Unhandled error in %s", type(view).__name__ if view else "view", exc_info=exc)
    if isinstance(exc, DispatchError):
        return Response({"message": "Dispatch error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({"message": "Internal server error"}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
