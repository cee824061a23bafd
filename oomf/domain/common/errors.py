"""Domain error types."""
from typing import Optional


class DomainError(Exception):
    """Base domain error."""

    code = "domain_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Resource not found."""

    code = "not_found"

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} with id {identifier} not found")


class ValidationError(DomainError):
    """Invalid input (length, format or shape violation)."""

    code = "invalid_input"


class AuthorizationError(DomainError):
    """Caller lacks authority over the target entity."""

    code = "forbidden"

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message)


class ConflictError(DomainError):
    """Resource conflict error."""

    code = "conflict"


class RateLimitedError(DomainError):
    """Rate-limit policy threshold hit."""

    code = "rate_limited"

    def __init__(self, action: str, retry_after: Optional[int] = None):
        self.action = action
        self.retry_after = retry_after
        if retry_after:
            message = f"Rate limit exceeded for {action}. Try again in {retry_after} seconds."
        else:
            message = f"Rate limit exceeded for {action}."
        super().__init__(message)


class InsufficientTokensError(DomainError):
    """Token balance does not cover the cost of the action."""

    code = "insufficient_tokens"

    def __init__(self, required: int, available: Optional[int] = None):
        self.required = required
        self.available = available
        if available is None:
            message = f"Not enough tokens. Need {required}."
        else:
            message = f"Not enough tokens. Need {required}, have {available}."
        super().__init__(message)


class AlreadyRevealedError(ConflictError):
    """Compliment sender was already disclosed."""

    code = "already_revealed"

    def __init__(self, message: str = "This compliment has already been revealed"):
        super().__init__(message)


class OutOfGuessesError(ConflictError):
    """No guesses left on the compliment."""

    code = "out_of_guesses"

    def __init__(self, message: str = "No guesses remaining"):
        super().__init__(message)


class OutOfSequenceError(ConflictError):
    """Hint requested out of order."""

    code = "out_of_sequence"

    def __init__(self, next_hint: int, message: Optional[str] = None):
        self.next_hint = next_hint
        super().__init__(message or f"You must get hints in order. Next hint: {next_hint}")


class AlreadyPurchasedError(OutOfSequenceError):
    """Hint was already bought for this compliment."""

    code = "already_purchased"

    def __init__(self, hint_number: int, next_hint: int):
        self.hint_number = hint_number
        super().__init__(next_hint, "This hint has already been used")
