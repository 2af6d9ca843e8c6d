"""
Three-Operand Instructions
==========================

An Instruction is one evaluation step produced by the parser:

    destination = operand_1 <opcode> operand_2

The assignment opcode "=" is the exception. Its destination is the null
value and the instruction means "operand_1 = operand_2".

Operand slots by arity:
    BINARY: operand_1 and operand_2 both hold values
    UNARY:  operand_1 holds the operand, operand_2 is null
    ZERO:   operand_1 holds the value consumed by the marker, operand_2 is null
"""

from dataclasses import dataclass
from typing import Iterable

from esil_ir.operators import Operator
from esil_ir.values import Value


@dataclass(frozen=True)
class Instruction:
    """
    A single translated instruction.

    Attributes:
        opcode: The operator applied
        destination: Result value (null for assignments)
        operand_1: First operand, in source order
        operand_2: Second operand, in source order (null if absent)
    """
    opcode: Operator
    destination: Value
    operand_1: Value
    operand_2: Value

    @property
    def is_assignment(self) -> bool:
        return self.opcode.is_assignment

    def __str__(self) -> str:
        """Format as 'dst = a op b', or 'a = b' for assignments."""
        if self.is_assignment:
            return f"{self.operand_1.name} = {self.operand_2.name}"
        return (
            f"{self.destination.name} = {self.operand_1.name} "
            f"{self.opcode.symbol} {self.operand_2.name}"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "text": str(self),
            "opcode": self.opcode.symbol,
            "arity": int(self.opcode.arity),
            "destination": _value_to_dict(self.destination),
            "operand_1": _value_to_dict(self.operand_1),
            "operand_2": _value_to_dict(self.operand_2),
        }


def _value_to_dict(value: Value) -> dict:
    return {
        "name": value.name,
        "size": value.size,
        "location": value.location.name.lower(),
        "value": value.value,
    }


def render(instructions: Iterable[Instruction]) -> list[str]:
    """Render each instruction in its textual form."""
    return [str(inst) for inst in instructions]
