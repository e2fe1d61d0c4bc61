"""Envelope helpers and error codes shared by the scheduling services."""

import logging
from typing import Any

from fastapi import status

from gym_backend.schemas.responses import ErrorInfo, ServiceResponse

logger = logging.getLogger(__name__)

INVALID_DURATION = 'INVALID_DURATION'
TRAINER_DOUBLE_BOOKED = 'TRAINER_DOUBLE_BOOKED'
TRAINER_UNAVAILABLE = 'TRAINER_UNAVAILABLE'
MEMBER_DOUBLE_BOOKED = 'MEMBER_DOUBLE_BOOKED'
TRAINER_NOT_FOUND = 'TRAINER_NOT_FOUND'
MEMBER_NOT_FOUND = 'MEMBER_NOT_FOUND'
SERVICE_NOT_FOUND = 'SERVICE_NOT_FOUND'
LOCATION_NOT_FOUND = 'LOCATION_NOT_FOUND'
LOCATION_CLOSED = 'LOCATION_CLOSED'
APPOINTMENT_NOT_FOUND = 'APPOINTMENT_NOT_FOUND'
APPOINTMENT_NOT_PENDING = 'APPOINTMENT_NOT_PENDING'
APPOINTMENT_ALREADY_CANCELLED = 'APPOINTMENT_ALREADY_CANCELLED'
APPOINTMENT_COMPLETED = 'APPOINTMENT_COMPLETED'

AVAILABILITY_CHECK_FAILED = 'AVAILABILITY_CHECK_FAILED'
BOOKING_FAILED = 'BOOKING_FAILED'
CONFIRM_FAILED = 'CONFIRM_FAILED'
CANCEL_FAILED = 'CANCEL_FAILED'
DELETE_FAILED = 'DELETE_FAILED'
APPOINTMENT_QUERY_FAILED = 'APPOINTMENT_QUERY_FAILED'
TRAINER_SEARCH_FAILED = 'TRAINER_SEARCH_FAILED'


def success(data: Any = None, message: str | None = None) -> ServiceResponse:
    return ServiceResponse(is_successful=True, data=data, message=message)


def failure(message: str, error_code: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> ServiceResponse:
    logger.info('Scheduling request rejected: %s (%s)', message, error_code)
    return ServiceResponse(
        is_successful=False,
        error=ErrorInfo(message=message, error_code=error_code, status_code=status_code),
    )


def not_found(message: str, error_code: str) -> ServiceResponse:
    return failure(message, error_code, status.HTTP_404_NOT_FOUND)


def unexpected(message: str, error_code: str) -> ServiceResponse:
    """Generic 500 envelope; the caller has already logged the exception."""
    return ServiceResponse(
        is_successful=False,
        error=ErrorInfo(
            message=message,
            error_code=error_code,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
    )


def invalid_duration(duration_minutes: int) -> ServiceResponse | None:
    if duration_minutes <= 0:
        return failure('Duration must be a positive number of minutes.', INVALID_DURATION)
    return None
