from typing import Optional


class BookingError(Exception):
    """Base error rendered as {success: false, error: {message, code, details?}}."""

    status_code = 400
    code = "BOOKING_ERROR"
    message = "Request failed"

    def __init__(self, message: Optional[str] = None, details: Optional[list] = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        error = {"message": self.message, "code": self.code}
        if self.details is not None:
            error["details"] = self.details
        return {"success": False, "error": error}


class BookingValidationError(BookingError):
    code = "VALIDATION_ERROR"
    message = "Validation failed"


class InvalidIdFormat(BookingError):
    code = "INVALID_ID_FORMAT"
    message = "Invalid booking ID format"


class BookingNotFound(BookingError):
    status_code = 404
    code = "BOOKING_NOT_FOUND"
    message = "Booking not found"


class SearchTermRequired(BookingError):
    code = "SEARCH_TERM_REQUIRED"
    message = "Search term is required"


class InvalidFilterValue(BookingError):
    code = "INVALID_FILTER_VALUE"


class InvalidDateFormat(BookingError):
    code = "INVALID_DATE_FORMAT"


class InvalidPriceRange(BookingError):
    code = "INVALID_PRICE_RANGE"


class InvalidPagination(BookingError):
    code = "INVALID_PAGINATION"


class InvalidSortField(BookingError):
    code = "INVALID_SORT_FIELD"


class InvalidSortOrder(BookingError):
    code = "INVALID_SORT_ORDER"


class InvalidRating(BookingError):
    code = "INVALID_RATING"
    message = "Rating must be an integer between 1 and 5"


class BookingNotCompleted(BookingError):
    code = "BOOKING_NOT_COMPLETED"
    message = "Only completed bookings can be rated"


class InvalidShareToken(BookingError):
    status_code = 403
    code = "INVALID_SHARE_TOKEN"
    message = "Share link is invalid or has been tampered with"


class NotificationsDisabled(BookingError):
    status_code = 503
    code = "NOTIFICATIONS_DISABLED"
    message = "This sharing channel is not configured"


class ShareDeliveryError(BookingError):
    status_code = 502
    code = "SHARE_DELIVERY_ERROR"
    message = "Failed to deliver the booking confirmation"
