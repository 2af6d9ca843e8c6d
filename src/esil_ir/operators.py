"""
ESIL Operator Definitions
=========================

Maps ESIL operator tokens to Operator records (symbol plus arity). The
arity tells the parser how many operands an operator consumes from the
stack.

Operator Set
------------
**Binary** (consume two operands):
    ==  <  >  <=  >=  <<  >>  &  |  =  *  ^  +  -  /  %

**Unary** (consume one operand):
    ?{  !  --  ++

**Zero** (block close marker):
    }

Lookups are exact: "+" matches, "+ " or "+=" do not. Composite tokens such
as "+=" are expanded by the parser, not by this table.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping, Optional


# =============================================================================
# Arity
# =============================================================================

class Arity(IntEnum):
    """
    Number of stack operands an operator consumes.

    TERNARY is reserved: no built-in operator uses it and the parser
    reports it as unsupported.
    """
    ZERO = 0
    UNARY = 1
    BINARY = 2
    TERNARY = 3


# =============================================================================
# Operator
# =============================================================================

@dataclass(frozen=True)
class Operator:
    """
    An ESIL operator.

    Attributes:
        symbol: Operator text as it appears in ESIL (e.g., "+", "?{")
        arity: Number of operands consumed from the stack
    """
    symbol: str
    arity: Arity

    @property
    def is_assignment(self) -> bool:
        """True for the plain assignment operator '='."""
        return self.symbol == ASSIGNMENT_SYMBOL

    def __str__(self) -> str:
        return self.symbol


ASSIGNMENT_SYMBOL = "="

ASSIGN = Operator(ASSIGNMENT_SYMBOL, Arity.BINARY)


# =============================================================================
# Operator Table
# =============================================================================

OPERATOR_TABLE: dict[str, Operator] = {
    op.symbol: op
    for op in (
        # Comparison
        Operator("==", Arity.BINARY),
        Operator("<", Arity.BINARY),
        Operator(">", Arity.BINARY),
        Operator("<=", Arity.BINARY),
        Operator(">=", Arity.BINARY),
        # Shift and bitwise
        Operator("<<", Arity.BINARY),
        Operator(">>", Arity.BINARY),
        Operator("&", Arity.BINARY),
        Operator("|", Arity.BINARY),
        Operator("^", Arity.BINARY),
        # Assignment
        ASSIGN,
        # Arithmetic
        Operator("*", Arity.BINARY),
        Operator("+", Arity.BINARY),
        Operator("-", Arity.BINARY),
        Operator("/", Arity.BINARY),
        Operator("%", Arity.BINARY),
        # Unary and conditional
        Operator("?{", Arity.UNARY),
        Operator("!", Arity.UNARY),
        Operator("--", Arity.UNARY),
        Operator("++", Arity.UNARY),
        # Block close
        Operator("}", Arity.ZERO),
    )
}


def lookup_operator(
    token: str,
    table: Optional[Mapping[str, Operator]] = None,
) -> Optional[Operator]:
    """
    Look up an operator by its exact token text.

    Args:
        token: Token to look up
        table: Operator table to search (default: OPERATOR_TABLE)

    Returns:
        The Operator, or None if the token is not an operator
    """
    if table is None:
        table = OPERATOR_TABLE
    return table.get(token)
