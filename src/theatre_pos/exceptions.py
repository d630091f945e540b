"""Domain-specific exceptions for the theatre POS reporting core.

All exceptions inherit from TheatrePosError for easy catching.
"""


class TheatrePosError(Exception):
    """Base exception for all theatre POS reporting errors."""

    pass


class ConfigError(TheatrePosError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Invalid configuration values are provided
    - Configuration files cannot be loaded or parsed
    """

    pass


class DataQualityError(TheatrePosError):
    """Raised when an order record cannot be used for reporting.

    This exception is raised when:
    - Required monetary fields are missing or not numeric
    - Department or payment method values are not recognized
    - Line items are malformed
    """

    pass


class PersistenceError(TheatrePosError):
    """Raised when the key-value store fails to read, write or delete a key."""

    pass
