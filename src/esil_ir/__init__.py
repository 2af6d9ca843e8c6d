"""
ESIL-IR - ESIL to Three-Operand Instruction Translator
======================================================

This package translates ESIL (Evaluable Strings Intermediate Language), the
stack-based intermediate language emitted by binary-analysis front ends such
as radare2, into a linear list of three-operand instructions for decompiler
and static-analysis pipelines.

Main Components
---------------
- **operators**: ESIL operator table (symbol and arity)
- **registers**: Register tables and architecture profiles
- **values**: Operand model and operand token classification
- **instructions**: Three-operand instruction model and rendering
- **parser**: Stack-based ESIL parser (EsilParser)
- **config**: Translator settings (TranslatorConfig)
- **cli**: The esil2ir command-line tool

Quick Start
-----------
Translate an expression:
    >>> from esil_ir import EsilParser, render
    >>> parser = EsilParser()
    >>> result = parser.parse("rax,8,+=")
    >>> render(result.instructions)
    ['tmp_1 = rax + 8', 'rax = tmp_1']

Or use the command-line tool:
    $ esil2ir "rax,8,+="
    tmp_1 = rax + 8
    rax = tmp_1

Reference Documentation
-----------------------
- ESIL: https://github.com/radare/radare2/wiki/ESIL
"""

__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================

from esil_ir.errors import (
    EsilError,
    TranslationError,
    StackUnderflowError,
    UnknownOperatorError,
    UnsupportedArityError,
    ConfigurationError,
    UnknownArchitectureError,
    TokenLocation,
    Diagnostic,
    DiagnosticKind,
)
from esil_ir.operators import (
    Arity,
    Operator,
    OPERATOR_TABLE,
    lookup_operator,
)
from esil_ir.registers import (
    ArchitectureProfile,
    X86_64,
    X86_64_REGISTERS,
    lookup_register,
    get_architecture,
    register_architecture,
    unregister_architecture,
    list_architectures,
)
from esil_ir.values import Location, Value, classify_operand
from esil_ir.instructions import Instruction, render
from esil_ir.parser import (
    EsilParser,
    ParseResult,
    ParseStatus,
    TemporaryAllocator,
    translate,
)
from esil_ir.config import TranslatorConfig

__all__ = [
    "__version__",
    # Errors
    "EsilError",
    "TranslationError",
    "StackUnderflowError",
    "UnknownOperatorError",
    "UnsupportedArityError",
    "ConfigurationError",
    "UnknownArchitectureError",
    "TokenLocation",
    "Diagnostic",
    "DiagnosticKind",
    # Operators
    "Arity",
    "Operator",
    "OPERATOR_TABLE",
    "lookup_operator",
    # Registers and profiles
    "ArchitectureProfile",
    "X86_64",
    "X86_64_REGISTERS",
    "lookup_register",
    "get_architecture",
    "register_architecture",
    "unregister_architecture",
    "list_architectures",
    # Values and instructions
    "Location",
    "Value",
    "classify_operand",
    "Instruction",
    "render",
    # Parser
    "EsilParser",
    "ParseResult",
    "ParseStatus",
    "TemporaryAllocator",
    "translate",
    # Configuration
    "TranslatorConfig",
]
