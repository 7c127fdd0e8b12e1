"""Generation-time errors.

Every error here is fatal: generation stops and nothing is written.
"""

from .types import Span


class GenerationError(RuntimeError):
    """Raised when a service definition cannot be turned into a wrapper."""

    def __init__(self, message: str, span: Span | None = None, help_text: str | None = None):
        super().__init__(message)
        self.message = message
        self.span = span
        self.help = help_text

    def __str__(self) -> str:
        if self.span is None:
            return self.message
        return f"line {self.span.line}, column {self.span.column}: {self.message}"


class ParseError(GenerationError):
    """Raised when the definition file is not valid syntax."""


class SignatureError(GenerationError):
    """Raised when an rpc signature does not have the required shape."""


class AnnotationError(GenerationError):
    """Raised when a @middleware annotation is malformed."""


class ArgumentError(GenerationError):
    """Raised when the @middleware_service arguments are malformed."""


class InternalError(GenerationError):
    """Raised when the generator breaks one of its own invariants."""


class ValidationError(GenerationError):
    """Raised when the definition file is well formed but inconsistent."""
