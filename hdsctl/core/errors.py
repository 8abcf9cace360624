"""Domain-specific errors for hdsctl."""


class HdsctlError(Exception):
    """Base error for hdsctl."""


class CatalogValidationError(HdsctlError):
    """Raised when a catalog file does not conform to schema or semantics."""


class CatalogLoadError(HdsctlError):
    """Raised when reading catalog sources fails."""


class ConfigError(HdsctlError):
    """Raised when the settings file cannot be read or is invalid."""


class UnknownCommandError(HdsctlError):
    """Raised when a mnemonic is not in the command catalog."""


class UnexpectedArgumentsError(HdsctlError):
    """Raised when a query carries arguments or a set is missing its argument."""


class UnknownFieldError(HdsctlError):
    """Raised when a field identifier or channel cannot be resolved."""


class ScriptExecutionError(HdsctlError):
    """Raised when a script command fails; `command` holds the offending text."""

    def __init__(self, message: str, command: str) -> None:
        super().__init__(message)
        self.command = command


class DeviceIdentityError(HdsctlError):
    """Raised when the connected instrument does not identify as supported."""


class UnexpectedResponseLengthError(HdsctlError):
    """Raised when a bulk data query returns an implausibly short buffer."""


class MalformedStatusBlockError(HdsctlError):
    """Raised when the status head document cannot be decoded."""


class TransportError(HdsctlError):
    """Base device link error."""


class TransportConnectError(TransportError):
    """Raised when the device link cannot be opened."""


class ShortWriteError(TransportError):
    """Raised when fewer bytes were written than the command length."""


class TransportTimeoutError(TransportError):
    """Raised when a bulk transfer times out."""
