from fastapi import status


class AppError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(self, detail: str | None = None):
        if detail:
            self.detail = detail
        super().__init__(self.detail)


class InputValidationError(AppError):
    """Malformed input, rejected before any store call."""

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Invalid input."


class PreconditionFailedError(AppError):
    """
    The operation is valid but the current state does not allow it.
    Nothing was written; callers should re-fetch and show the current state.
    """

    status_code = status.HTTP_409_CONFLICT
    detail = "The operation no longer applies to the current state."


class PartialWriteFailure(AppError):
    """
    One half of a paired write landed and the other did not.
    Retrying the whole operation converges to the intended end state.
    """

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, operation: str):
        detail = f"The operation '{operation}' was only partially applied. Please try again."
        super().__init__(detail)
        self.operation = operation
