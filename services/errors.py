"""Engine errors, each mapped to an HTTP status and a stable code."""


class BookingEngineError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str = None, **details):
        self.message = message or (self.__doc__ or self.code).strip()
        self.details = details
        super().__init__(self.message)

    def to_dict(self):
        payload = {"error": self.message, "code": self.code}
        payload.update(self.details)
        return payload


# ---------- 400 ----------
class ValidationError(BookingEngineError):
    """Invalid input"""
    status_code = 400
    code = "validation_error"


class PastDateError(ValidationError):
    """Date cannot be in the past"""
    code = "past_date"


class MissingRequiredAnswers(ValidationError):
    """Not all required filter-questions were answered"""
    code = "missing_required_answers"

    def __init__(self, missing_question_ids, message: str = None):
        super().__init__(message, missing_question_ids=sorted(missing_question_ids))
        self.missing_question_ids = sorted(missing_question_ids)


# ---------- 403 ----------
class PermissionDeniedError(BookingEngineError):
    """Forbidden"""
    status_code = 403
    code = "forbidden"


class WithinCutoffWindow(PermissionDeniedError):
    """Bookings cannot be canceled this close to their start"""
    code = "within_cutoff_window"


# ---------- 404 ----------
class NotFoundError(BookingEngineError):
    """Not found"""
    status_code = 404
    code = "not_found"


# ---------- 409 ----------
class ConflictError(BookingEngineError):
    """Conflict"""
    status_code = 409
    code = "conflict"


class OverlapConflict(ConflictError):
    """Time range overlaps an existing slot"""
    code = "overlap"


class AlreadyClaimed(ConflictError):
    """Timeslot is no longer available"""
    code = "already_claimed"


class InvalidStatus(ConflictError):
    """Booking status does not allow this action"""
    code = "invalid_status"


# ---------- 500 ----------
class TransientError(BookingEngineError):
    """Temporary failure, safe to retry"""
    status_code = 500
    code = "transient_error"
