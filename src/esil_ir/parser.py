"""
ESIL Parser
===========

This module converts ESIL (Evaluable Strings Intermediate Language)
expressions into a list of three-operand instructions.

ESIL is a comma-separated, stack-based language. Operand tokens are pushed
onto a stack; operator tokens pop their operands and push a result:

    rax,rbx,+      ->  tmp_1 = rax + rbx
    rax,rbx,=      ->  rax = rbx
    rax,rbx,^=     ->  tmp_1 = rax ^ rbx
                       rax = tmp_1

Translation Process
-------------------
Each token of an expression is dispatched in order:

1. **Operator** (exact table match): pop its operands, emit an instruction
   and push the result. Results of "=" are the null value; every other
   operator produces a fresh temporary (tmp_1, tmp_2, ...).

2. **Operand** (no '=' in the token): classify as register, constant or
   unknown and push it.

3. **Composite** (contains '=', e.g. "+=", "<<="): apply the operator, then
   assign its result back to the operand that went into its first slot.

Outcomes
--------
parse() returns a ParseResult. Problems do not stop the parser unless they
make the rest of the expression meaningless:

- Stack underflow: the instruction is skipped, the stack is untouched and
  the call is PARTIAL.
- Unknown operator inside a composite token: the remaining tokens are not
  processed and the call is FAILED.

With strict=True the matching TranslationError is raised instead.

Example Usage
-------------
>>> from esil_ir import EsilParser
>>> parser = EsilParser()
>>> result = parser.parse("eax,ebx,^=")
>>> result.status
<ParseStatus.SUCCESS: 'success'>
>>> [str(inst) for inst in parser.emit_instructions()]
['tmp_1 = eax ^ ebx', 'eax = tmp_1']

Calling parse() again on the same parser keeps the stack, keeps the
instructions, and keeps counting temporaries.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from esil_ir.errors import (
    Diagnostic,
    DiagnosticKind,
    StackUnderflowError,
    TokenLocation,
    TranslationError,
    UnknownOperatorError,
    UnsupportedArityError,
)
from esil_ir.instructions import Instruction
from esil_ir.operators import ASSIGN, ASSIGNMENT_SYMBOL, Arity, Operator
from esil_ir.registers import ArchitectureProfile, X86_64, get_architecture
from esil_ir.values import Value, classify_operand

# Logger for this module
logger = logging.getLogger(__name__)

TOKEN_SEPARATOR = ","

_DIAGNOSTIC_KINDS: dict[type, DiagnosticKind] = {
    StackUnderflowError: DiagnosticKind.STACK_UNDERFLOW,
    UnknownOperatorError: DiagnosticKind.UNKNOWN_OPERATOR,
    UnsupportedArityError: DiagnosticKind.UNSUPPORTED_ARITY,
}


# =============================================================================
# Parse Results
# =============================================================================

class ParseStatus(Enum):
    """Outcome of one parse() call."""
    SUCCESS = "success"   # Every token translated
    PARTIAL = "partial"   # Some instructions skipped, all tokens processed
    FAILED = "failed"     # Translation stopped before the last token


@dataclass
class ParseResult:
    """
    Outcome of translating one ESIL expression.

    Attributes:
        expression: The ESIL text that was parsed
        status: SUCCESS, PARTIAL or FAILED
        instructions: Instructions emitted by this call only
        diagnostics: Problems found, in the order they occurred
        tokens_consumed: Tokens processed before the call finished or stopped
    """
    expression: str
    status: ParseStatus = ParseStatus.SUCCESS
    instructions: list[Instruction] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    tokens_consumed: int = 0

    @property
    def ok(self) -> bool:
        """True if every token was translated without problems."""
        return self.status is ParseStatus.SUCCESS

    def raise_for_status(self) -> "ParseResult":
        """
        Raise the error of the first diagnostic, if any.

        Returns:
            self, so calls can be chained

        Raises:
            TranslationError: The first problem recorded by the call
        """
        if self.diagnostics:
            raise self.diagnostics[0].error
        return self

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "expression": self.expression,
            "status": self.status.value,
            "instructions": [inst.to_dict() for inst in self.instructions],
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "tokens_consumed": self.tokens_consumed,
        }


# =============================================================================
# Temporary Allocation
# =============================================================================

class TemporaryAllocator:
    """
    Hands out temporaries with strictly increasing indices.

    Indices start at 1 and are never reused for the lifetime of the
    allocator.
    """

    def __init__(self):
        self._last = 0

    @property
    def last_index(self) -> int:
        """Index of the most recent temporary (0 if none allocated)."""
        return self._last

    def allocate(self) -> Value:
        self._last += 1
        return Value.temporary(self._last)


# =============================================================================
# ESIL Parser
# =============================================================================

class EsilParser:
    """
    Translates ESIL expressions into three-operand instructions.

    One parser holds the state of one translation unit: the operand stack,
    the instructions emitted so far and the temporary counter. Parsers are
    not thread-safe; use one parser per thread. Architecture profiles may
    be shared freely.

    Attributes:
        profile: Architecture profile supplying the default tables
        default_size: Width in bits for constants and unknown operands
        strict: Raise TranslationError instead of recording diagnostics
    """

    def __init__(
        self,
        profile: ArchitectureProfile | str | None = None,
        *,
        operators: Optional[Mapping[str, Operator]] = None,
        registers: Optional[Mapping[str, int]] = None,
        default_size: Optional[int] = None,
        strict: bool = False,
    ):
        """
        Initialize the parser.

        Args:
            profile: Profile or registered architecture name (default: x86_64)
            operators: Operator table overriding the profile's
            registers: Register table overriding the profile's
            default_size: Operand width overriding the profile's
            strict: Raise on the first problem instead of recording it

        Raises:
            UnknownArchitectureError: If profile names an unregistered architecture
        """
        if profile is None:
            profile = X86_64
        elif isinstance(profile, str):
            profile = get_architecture(profile)

        self.profile = profile
        self.strict = strict
        self.default_size = (
            default_size if default_size is not None else profile.default_size
        )
        self._operators = dict(operators if operators is not None else profile.operators)
        self._registers = dict(registers if registers is not None else profile.registers)
        self._assign = self._operators.get(ASSIGNMENT_SYMBOL, ASSIGN)

        self._stack: list[Value] = []
        self._instructions: list[Instruction] = []
        self._temporaries = TemporaryAllocator()

    # =========================================================================
    # State Inspection
    # =========================================================================

    @property
    def stack(self) -> list[Value]:
        """Copy of the operand stack (top of stack last)."""
        return list(self._stack)

    @property
    def temporary_count(self) -> int:
        """Number of temporaries allocated so far."""
        return self._temporaries.last_index

    def emit_instructions(self) -> list[Instruction]:
        """
        Get all instructions emitted so far, across every parse() call.

        Returns a new list; the parser's state is not changed.
        """
        return list(self._instructions)

    # =========================================================================
    # Main Parsing Interface
    # =========================================================================

    def parse(self, esil: str) -> ParseResult:
        """
        Translate one ESIL expression.

        Instructions are appended to the parser's instruction list and the
        stack carries over to the next call.

        Args:
            esil: Comma-separated ESIL text

        Returns:
            ParseResult describing what this call emitted

        Raises:
            TranslationError: In strict mode, on the first problem found
        """
        result = ParseResult(expression=esil)
        first_new = len(self._instructions)
        tokens = esil.split(TOKEN_SEPARATOR)

        for position, token in enumerate(tokens):
            location = TokenLocation(esil, position, token)
            try:
                self._dispatch(token, location)
            except UnknownOperatorError as e:
                self._record(result, e)
                result.status = ParseStatus.FAILED
                logger.error(
                    f"Translation of '{esil}' stopped at token {position}: {e.message}"
                )
                break
            except TranslationError as e:
                self._record(result, e)
                result.status = ParseStatus.PARTIAL
                logger.warning(f"Skipped token {position} of '{esil}': {e.message}")
            result.tokens_consumed = position + 1

        result.instructions = self._instructions[first_new:]
        logger.debug(
            f"Parsed '{esil}': {result.status.value}, "
            f"{len(result.instructions)} instruction(s), stack depth {len(self._stack)}"
        )
        return result

    def _record(self, result: ParseResult, error: TranslationError) -> None:
        if self.strict:
            raise error
        result.diagnostics.append(Diagnostic(_DIAGNOSTIC_KINDS[type(error)], error))

    # =========================================================================
    # Token Dispatch
    # =========================================================================

    def _dispatch(self, token: str, location: TokenLocation) -> None:
        operator = self._operators.get(token)
        if operator is not None:
            self._apply(operator, location)
        elif ASSIGNMENT_SYMBOL not in token:
            value = classify_operand(token, self._registers, self.default_size)
            logger.debug(f"Push {value.location.name.lower()} operand '{token}'")
            self._stack.append(value)
        else:
            self._expand_composite(token, location)

    def _expand_composite(self, token: str, location: TokenLocation) -> None:
        """
        Expand a composite token such as "+=" into basic instructions.

        For each operator piece of the token, the operand that will fill the
        operator's first slot is remembered as the assignment target, the
        operator is applied, and the result is assigned to the target:

            a,b,+=  ->  tmp_1 = a + b
                        a = tmp_1
        """
        pieces = token.split(ASSIGNMENT_SYMBOL)
        if pieces[-1] == "":
            pieces.pop()

        for piece in pieces:
            operator = self._operators.get(piece)
            if operator is None:
                raise UnknownOperatorError(piece, token, location)

            target = self._stack[-self._operand_count(operator, location)]
            self._apply(operator, location)

            # Target goes beneath the result: "target = result"
            result = self._stack.pop()
            self._stack.append(target)
            self._stack.append(result)
            self._apply(self._assign, location)

    # =========================================================================
    # Stack Evaluation
    # =========================================================================

    def _operand_count(self, operator: Operator, location: TokenLocation) -> int:
        """
        Stack values an operator consumes, checked against the stack.

        ZERO arity markers still consume the value they close over.

        Raises:
            UnsupportedArityError: For TERNARY operators
            StackUnderflowError: If the stack is too shallow
        """
        if operator.arity is Arity.TERNARY:
            raise UnsupportedArityError(operator.symbol, int(operator.arity), location)

        count = max(int(operator.arity), 1)
        if len(self._stack) < count:
            raise StackUnderflowError(operator.symbol, count, len(self._stack), location)
        return count

    def _apply(self, operator: Operator, location: TokenLocation) -> None:
        """
        Pop an operator's operands, emit its instruction and push the result.

        On underflow nothing is popped and nothing is emitted.
        """
        count = self._operand_count(operator, location)

        operand_2 = self._stack.pop() if count == 2 else Value.null()
        operand_1 = self._stack.pop()

        if operator.is_assignment:
            destination = Value.null()
        else:
            destination = self._temporaries.allocate()

        instruction = Instruction(operator, destination, operand_1, operand_2)
        self._instructions.append(instruction)
        self._stack.append(destination)
        logger.debug(f"Emit '{instruction}'")


# =============================================================================
# Convenience Functions
# =============================================================================

def translate(
    esil: str,
    architecture: str = X86_64.name,
    strict: bool = False,
) -> ParseResult:
    """
    Translate a single ESIL expression with a fresh parser.

    Args:
        esil: Comma-separated ESIL text
        architecture: Registered architecture name
        strict: Raise on the first problem instead of recording it

    Returns:
        ParseResult of the translation
    """
    return EsilParser(architecture, strict=strict).parse(esil)
