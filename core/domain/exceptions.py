"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseNotFoundError(LicenseException):
    """Raised when a license is not found."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class InvalidCredentialsError(LicenseException):
    """
    Raised when an email + key pair does not resolve to a license.

    The message never says which half of the pair was wrong.
    """

    def __init__(self, message: str = "Invalid email or license key"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class LicenseInvalidError(LicenseException):
    """Raised at the API boundary when a license fails its validity check."""

    def __init__(self, reason: str):
        super().__init__(reason, code="LICENSE_INVALID")
        self.reason = reason


class DuplicateActiveLicenseError(LicenseException):
    """Raised when an email already holds a live (active/trial) license."""

    def __init__(self, message: str = "Active license already exists for this email"):
        super().__init__(message, code="DUPLICATE_ACTIVE_LICENSE")


class InvalidTransitionError(LicenseException):
    """Raised when a lifecycle operation is not allowed from the current state."""

    def __init__(self, message: str = "Invalid license state transition"):
        super().__init__(message, code="INVALID_TRANSITION")


class ConcurrentUpdateError(LicenseException):
    """Raised when a license changed between load and persist."""

    def __init__(self, message: str = "License was modified concurrently, please retry"):
        super().__init__(message, code="CONCURRENT_UPDATE")


class KeyCollisionError(LicenseException):
    """Raised when a generated license key is already taken."""

    def __init__(self, message: str = "Generated license key already exists"):
        super().__init__(message, code="KEY_COLLISION")


class ActivityException(DomainException):
    """Base exception for activity-related errors."""

    pass


class ActivityUnauthorizedError(ActivityException):
    """Raised when activity is reported or queried without a usable license."""

    def __init__(
        self,
        message: str = "No active license found",
        code: str = "NO_ACTIVE_LICENSE",
    ):
        super().__init__(message, code=code)
