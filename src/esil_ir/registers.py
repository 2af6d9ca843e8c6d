"""
Register Tables and Architecture Profiles
=========================================

A register table maps register names to their width in bits. The parser
uses it to decide whether an operand token names a register.

Register tables and operator tables are bundled into an
ArchitectureProfile, and profiles are looked up by architecture
identifier. Only the "x86_64" example profile is built in; callers with
other targets register their own:

    >>> from esil_ir.registers import (
    ...     ArchitectureProfile, get_architecture, register_architecture,
    ... )
    >>> register_architecture(ArchitectureProfile(
    ...     name="toy8",
    ...     registers={"a": 8, "x": 8, "pc": 16},
    ...     default_size=8,
    ... ))
    >>> get_architecture("toy8").register_size("pc")
    16
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from esil_ir.errors import UnknownArchitectureError
from esil_ir.operators import OPERATOR_TABLE, Operator


# Width used for constants and unclassified operands
DEFAULT_OPERAND_SIZE = 64

DEFAULT_ARCHITECTURE = "x86_64"


# =============================================================================
# Register Table
# =============================================================================

X86_64_REGISTERS: dict[str, int] = {
    "rax": 64,
    "rbx": 64,
    "rcx": 64,
    "rdx": 64,
    "rsp": 64,
    "rbp": 64,
    "rsi": 64,
    "rdi": 64,
    "rip": 64,
}


def lookup_register(
    name: str,
    table: Optional[Mapping[str, int]] = None,
) -> Optional[int]:
    """
    Look up the width of a register by exact name.

    Args:
        name: Register name (case-sensitive)
        table: Register table to search (default: X86_64_REGISTERS)

    Returns:
        Width in bits, or None if the name is not a register
    """
    if table is None:
        table = X86_64_REGISTERS
    return table.get(name)


# =============================================================================
# Architecture Profiles
# =============================================================================

@dataclass(frozen=True)
class ArchitectureProfile:
    """
    Operator and register tables for one target architecture.

    Profiles are read-only after construction and may be shared between
    any number of parsers.

    Attributes:
        name: Architecture identifier (e.g., "x86_64")
        registers: Register name to width in bits
        operators: Operator token to Operator (default: OPERATOR_TABLE)
        default_size: Width for constants and unknown operands
    """
    name: str
    registers: Mapping[str, int]
    operators: Mapping[str, Operator] = field(
        default_factory=lambda: dict(OPERATOR_TABLE)
    )
    default_size: int = DEFAULT_OPERAND_SIZE

    def __post_init__(self):
        # Private copies so later edits to the caller's dicts have no effect
        object.__setattr__(self, "registers", dict(self.registers))
        object.__setattr__(self, "operators", dict(self.operators))

    def register_size(self, name: str) -> Optional[int]:
        """Width of register 'name' in bits, or None."""
        return self.registers.get(name)

    def operator(self, token: str) -> Optional[Operator]:
        """Operator for the exact token, or None."""
        return self.operators.get(token)


X86_64 = ArchitectureProfile(
    name=DEFAULT_ARCHITECTURE,
    registers=X86_64_REGISTERS,
)

_ARCHITECTURES: dict[str, ArchitectureProfile] = {
    X86_64.name: X86_64,
}


def register_architecture(profile: ArchitectureProfile, replace: bool = False) -> None:
    """
    Make a profile available through get_architecture().

    Args:
        profile: Profile to register under profile.name
        replace: Allow replacing an existing profile of the same name

    Raises:
        ValueError: If the name is taken and replace is False
    """
    if profile.name in _ARCHITECTURES and not replace:
        raise ValueError(f"architecture '{profile.name}' is already registered")
    _ARCHITECTURES[profile.name] = profile


def unregister_architecture(name: str) -> None:
    """Remove a registered profile. The built-in x86_64 profile stays."""
    if name == DEFAULT_ARCHITECTURE:
        raise ValueError(f"cannot remove built-in architecture '{name}'")
    _ARCHITECTURES.pop(name, None)


def get_architecture(name: str) -> ArchitectureProfile:
    """
    Look up a registered architecture profile.

    Raises:
        UnknownArchitectureError: If no profile has that name
    """
    try:
        return _ARCHITECTURES[name]
    except KeyError:
        raise UnknownArchitectureError(name, list_architectures()) from None


def list_architectures() -> list[str]:
    """Sorted identifiers of all registered profiles."""
    return sorted(_ARCHITECTURES)
