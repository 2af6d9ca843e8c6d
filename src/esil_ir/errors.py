"""
ESIL-IR Error Hierarchy
=======================

This module defines the exception hierarchy for the ESIL translator.
All exceptions inherit from EsilError, allowing callers to catch all
translator errors with a single except clause if desired.

Exception Hierarchy
-------------------
EsilError (base)
├── TranslationError (token-level translation problems)
│   ├── StackUnderflowError - operator needs more operands than are stacked
│   ├── UnknownOperatorError - composite sub-token is not a known operator
│   └── UnsupportedArityError - operator arity has no instruction form
└── ConfigurationError (profile and settings problems)
    └── UnknownArchitectureError - architecture identifier not registered

Translation Outcomes
--------------------
By default the parser does not raise these exceptions. It records a
Diagnostic for each problem and reports it through the ParseResult of the
call. The exceptions are raised in strict mode, or on demand through
ParseResult.raise_for_status().

Error messages follow this format:
    expression:position: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class EsilError(Exception):
    """
    Base exception for all ESIL-IR errors.

    All exceptions in the package inherit from this class, allowing callers
    to catch every translator error with a single except clause:

        try:
            parser.parse(esil).raise_for_status()
        except EsilError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Token Location Tracking
# =============================================================================

@dataclass(frozen=True)
class TokenLocation:
    """
    Position of a token inside one translated ESIL expression.

    Attributes:
        expression: The ESIL text passed to the parse call
        position: 0-based index of the token in that expression
        token: The offending token text
    """
    expression: str
    position: int
    token: str

    def __str__(self) -> str:
        """Format as 'expression:position' for error messages."""
        return f"{self.expression}:{self.position}"


# =============================================================================
# Translation Exceptions
# =============================================================================

class TranslationError(EsilError):
    """
    Base exception for problems found while translating tokens.

    Attributes:
        message: The error description
        location: Where in the expression the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[TokenLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            eax,+:1: error: operator '+' needs 2 operands, stack holds 1
            hint: push the missing operands before the operator
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class StackUnderflowError(TranslationError):
    """
    An operator requires more operands than the stack currently holds.

    The instruction is not emitted and the stack is left as it was.
    """

    def __init__(
        self,
        operator: str,
        required: int,
        available: int,
        location: Optional[TokenLocation] = None,
    ):
        self.operator = operator
        self.required = required
        self.available = available
        super().__init__(
            f"operator '{operator}' needs {required} operand(s), "
            f"stack holds {available}",
            location=location,
            hint="push the missing operands before the operator",
        )


class UnknownOperatorError(TranslationError):
    """
    A composite token contains a piece that is not a known operator.

    Translation of the current expression stops at this token.
    """

    def __init__(
        self,
        operator: str,
        composite: str,
        location: Optional[TokenLocation] = None,
    ):
        self.operator = operator
        self.composite = composite
        super().__init__(
            f"unknown operator '{operator}' in composite token '{composite}'",
            location=location,
        )


class UnsupportedArityError(TranslationError):
    """An operator's arity cannot be expressed as a three-operand instruction."""

    def __init__(
        self,
        operator: str,
        arity: int,
        location: Optional[TokenLocation] = None,
    ):
        self.operator = operator
        self.arity = arity
        super().__init__(
            f"operator '{operator}' with {arity} operands is not supported",
            location=location,
        )


# =============================================================================
# Configuration Exceptions
# =============================================================================

class ConfigurationError(EsilError):
    """Base exception for invalid translator configuration."""
    pass


class UnknownArchitectureError(ConfigurationError):
    """
    Requested architecture profile is not registered.

    Attributes:
        name: The requested architecture identifier
        available: Identifiers that are registered
    """

    def __init__(self, name: str, available: Optional[list[str]] = None):
        self.name = name
        self.available = available or []
        message = f"unknown architecture '{name}'"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


# =============================================================================
# Diagnostics
# =============================================================================

class DiagnosticKind(Enum):
    """Kinds of problems a translation call can report."""
    STACK_UNDERFLOW = "stack-underflow"
    UNKNOWN_OPERATOR = "unknown-operator"
    UNSUPPORTED_ARITY = "unsupported-arity"


@dataclass(frozen=True)
class Diagnostic:
    """
    A problem recorded during a non-strict translation call.

    The error attribute holds the exception that strict mode would have
    raised for the same problem.
    """
    kind: DiagnosticKind
    error: TranslationError

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def token(self) -> str:
        return self.error.location.token if self.error.location else ""

    @property
    def position(self) -> int:
        return self.error.location.position if self.error.location else -1

    def __str__(self) -> str:
        return str(self.error)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "token": self.token,
            "position": self.position,
        }
