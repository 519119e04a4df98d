"""Typed rejections raised by the transition engine.

Every business-rule violation is a ``TransitionError`` tagged with one of
three kinds. The kind decides the HTTP status the API answers with; the
message is shown to the user as-is.
"""
import enum
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    NOT_FOUND = 'NOT_FOUND'
    FORBIDDEN = 'FORBIDDEN'
    INVALID_STATE = 'INVALID_STATE'


STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
}


class TransitionError(APIException):
    default_detail = 'Invalid transition.'
    default_code = 'invalid_transition'

    def __init__(self, kind, message, status_code=None):
        super().__init__(detail=message, code=kind.value)
        self.kind = kind
        self.message = message
        self.status_code = status_code or STATUS_BY_KIND[kind]

    def __repr__(self):
        return f"TransitionError({self.kind.value}, {self.message!r})"


def not_found(message):
    return TransitionError(ErrorKind.NOT_FOUND, message)


def forbidden(message):
    return TransitionError(ErrorKind.FORBIDDEN, message)


def invalid_state(message, status_code=None):
    return TransitionError(ErrorKind.INVALID_STATE, message, status_code=status_code)


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, TransitionError):
        view = context.get('view')
        logger.warning(
            f"Rejected {view.__class__.__name__ if view else 'request'}: "
            f"{exc.kind.value} ({exc.status_code}) {exc.message}"
        )
        response.data = {
            'status': 'fail',
            'message': exc.message,
            'errorCode': exc.kind.value,
        }
    return response
