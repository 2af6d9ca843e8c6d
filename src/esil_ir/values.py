"""
Operand Values
==============

A Value is one operand or result in a translated instruction: a register,
a constant, a temporary produced by an earlier instruction, or a name the
translator could not classify.

Classification of operand tokens:
    1. Register name from the register table -> REGISTER, table width
    2. Base-10 signed 64-bit integer         -> CONSTANT, default width
    3. Anything else                         -> UNKNOWN, default width

Classification never fails. Hex literals ("0x10"), flag names ("%z") and
dereference markers ("[1]") all become UNKNOWN operands.
"""

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Mapping, Optional


# Optional sign then ASCII digits, nothing else
_DECIMAL_PATTERN = re.compile(r"[+-]?[0-9]+")

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class Location(Enum):
    """Where a value lives."""
    MEMORY = auto()      # Reserved, no token classifies as memory
    REGISTER = auto()    # Named CPU register
    CONSTANT = auto()    # Integer literal
    TEMPORARY = auto()   # Result of an earlier instruction
    UNKNOWN = auto()     # Unclassified operand token
    NULL = auto()        # No operand


@dataclass(frozen=True)
class Value:
    """
    An operand or result.

    Attributes:
        name: Operand text, or "tmp_<hex>" for temporaries
        size: Width in bits (0 for temporaries and the null value)
        location: Kind of operand, fixed at creation
        value: Literal value for constants, 0 otherwise
        typeset: Reserved type bitmask, always 0
    """
    name: str
    size: int
    location: Location
    value: int = 0
    typeset: int = 0

    @classmethod
    def null(cls) -> "Value":
        """The 'no operand' value."""
        return cls("", 0, Location.NULL)

    @classmethod
    def temporary(cls, index: int) -> "Value":
        """Temporary number 'index', named with its lowercase hex form."""
        return cls(f"tmp_{index:x}", 0, Location.TEMPORARY)

    @property
    def is_null(self) -> bool:
        return self.location is Location.NULL

    def __str__(self) -> str:
        return self.name


def parse_decimal(token: str) -> Optional[int]:
    """
    Parse a base-10 signed 64-bit integer.

    Returns None for anything else, including values outside the
    signed 64-bit range, whitespace, and underscores.
    """
    if not _DECIMAL_PATTERN.fullmatch(token):
        return None
    number = int(token)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return None
    return number


def classify_operand(
    token: str,
    registers: Mapping[str, int],
    default_size: int,
) -> Value:
    """
    Build a Value from an operand token.

    Args:
        token: Operand token text
        registers: Register name to width in bits
        default_size: Width for constants and unknown operands

    Returns:
        REGISTER, CONSTANT or UNKNOWN value for the token
    """
    size = registers.get(token)
    if size is not None:
        return Value(token, size, Location.REGISTER)

    number = parse_decimal(token)
    if number is not None:
        return Value(token, default_size, Location.CONSTANT, value=number)

    return Value(token, default_size, Location.UNKNOWN)
