class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )

class ScheduleValidationError(AppError):
    """Raised when a schedule item write would leave the item in an invalid state."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class InvalidWorkingHoursError(AppError):
    """Raised when a working-hour window cannot be split into hourly slots."""
    def __init__(self, start_hour: int, end_hour: int):
        super().__init__(
            f"Invalid working hours {start_hour}-{end_hour}; expected 0 <= start < end <= 24",
            status_code=400,
            details={"start_hour": start_hour, "end_hour": end_hour},
        )

class StoreUnavailableError(AppError):
    """Raised when the schedule store cannot complete an operation."""
    def __init__(self, operation: str):
        super().__init__(
            f"Schedule store failed to {operation}",
            status_code=503,
            details={"operation": operation},
        )
