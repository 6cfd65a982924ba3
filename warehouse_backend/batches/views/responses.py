# batches/views/responses.py

"""
Boundary mapping from batch-engine outcomes to HTTP responses.

- ValidationError         -> 400
- BatchNotFoundError      -> 404
- AllocationConflictError -> 409 (+ INSUFFICIENT_STOCK alert, replan=true)
- BatchStoreError         -> 503 (+ SYSTEM_ERROR alert)
"""

from rest_framework import status
from rest_framework.response import Response


def validation_error_response(exc):
    if hasattr(exc, "error_dict"):
        errors = exc.message_dict
        detail = "; ".join(f"{k}: {' '.join(v)}" for k, v in errors.items())
        return Response({"detail": detail, "errors": errors}, status=status.HTTP_400_BAD_REQUEST)
    return Response({"detail": "; ".join(exc.messages)}, status=status.HTTP_400_BAD_REQUEST)


def not_found_response(exc):
    return Response(
        {"detail": str(exc), "batch_ids": exc.batch_ids},
        status=status.HTTP_404_NOT_FOUND,
    )


def conflict_response(exc):
    return Response(
        {"detail": str(exc), "alert": exc.alert.to_dict(), "replan": True},
        status=status.HTTP_409_CONFLICT,
    )


def store_error_response(exc):
    return Response(
        {"detail": str(exc), "alert": exc.alert.to_dict()},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )
