"""
Error taxonomy shared by the fleet, assignment and dispatch services.

Services raise these; API views catch ``LedgerError`` at the boundary and turn
it into ``{"error": <kind>, "message": <text>}`` with the matching HTTP status.
"""
import logging

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for every typed failure of a ledger operation."""
    kind = 'ledger_error'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def as_dict(self):
        return {'error': self.kind, 'message': self.message}


class NotFound(LedgerError):
    """Referenced entity is absent, or not owned by the caller."""
    kind = 'not_found'
    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(LedgerError):
    """Transition attempted from a state that forbids it."""
    kind = 'invalid_state'
    status_code = status.HTTP_409_CONFLICT


class ValidationError(LedgerError):
    """Malformed or out-of-range input."""
    kind = 'validation_error'
    status_code = status.HTTP_400_BAD_REQUEST


class ResourceContention(LedgerError):
    """A concurrent writer won the race more times than the retry budget allows."""
    kind = 'resource_contention'
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class StoreFailure(LedgerError):
    """The underlying transaction was aborted for infrastructure reasons."""
    kind = 'store_failure'
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(exc):
    """Build the API response for a ledger failure."""
    if exc.status_code >= 500:
        logger.error(f"{exc.kind}: {exc.message}")
    return Response(exc.as_dict(), status=exc.status_code)
