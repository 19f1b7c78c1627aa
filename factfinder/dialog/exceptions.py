"""Dialog engine exception hierarchy."""


class DialogError(Exception):
    """Base exception for dialog engine errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ContractViolationError(DialogError):
    """Raised when a model response carries no usable completion flag.

    A response without progress state cannot be safely defaulted, so the
    caller must decide what the user sees.
    """

    def __init__(self, message: str, response_keys: list[str] | None = None) -> None:
        super().__init__(message)
        self.response_keys = response_keys or []
