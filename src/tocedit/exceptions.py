class TocEditError(Exception):
    """
    Base class for all errors raised by tocedit.
    """
    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidInputFileError(TocEditError):
    """
    Exception raised when the uploaded bytes are not a readable PDF document.
    """
    def __init__(self, message: str) -> None:
        super().__init__(message)


class StructuralError(TocEditError):
    """
    Exception raised when an outline tree invariant does not hold during build or serialization.
    """
    def __init__(self, message: str) -> None:
        super().__init__(message)


class ExternalServiceError(TocEditError):
    """
    Exception raised when the AI extraction service call fails.
    """
    def __init__(self, message: str) -> None:
        super().__init__(message)
