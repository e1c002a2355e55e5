import logging

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class IngestError(Exception):
    """Base class for errors raised while ingesting a results file."""


class RecordParseError(IngestError):
    """A line is not valid JSON (or not a JSON object)."""


class RecordValidationError(IngestError):
    """A required field is missing and cannot be derived."""


class BatchWriteError(IngestError):
    """A buffered batch failed to commit. The batch was rolled back."""

    def __init__(self, batch_number, rows, cause):
        self.batch_number = batch_number
        self.rows = rows
        self.cause = cause
        super().__init__(f"batch {batch_number} ({rows} rows) failed: {cause}")


class InvalidRequest(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request parameters."
    default_code = "invalid_request"


class StudentNotFound(NotFound):
    default_detail = "Student not found."
    default_code = "student_not_found"


def results_exception_handler(exc, context):
    """Render API errors as {"error": ..., "code": ...} and log them with the request parameters."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    request = context.get("request")
    detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
    code = getattr(exc, "default_code", "error")
    if hasattr(exc, "get_codes"):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes

    logger.warning(
        "%s %s -> %s (%s) params=%s",
        getattr(request, "method", "?"),
        getattr(request, "path", "?"),
        response.status_code,
        detail,
        dict(request.query_params) if request is not None else {},
    )
    response.data = {"error": detail, "code": code}
    return response
