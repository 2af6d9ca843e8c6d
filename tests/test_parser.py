# =============================================================================
# test_parser.py - ESIL Parser Unit Tests
# =============================================================================
# Tests for the stack-based ESIL parser.
#
# Test coverage includes:
#   - Operand classification on push
#   - Binary, unary and block-close operators
#   - Assignment and composite operators ("+=", "<<=")
#   - Stack underflow and unknown operator outcomes
#   - Strict mode
#   - State carried across parse() calls
# =============================================================================

import pytest

from esil_ir.errors import (
    DiagnosticKind,
    StackUnderflowError,
    UnknownOperatorError,
    UnsupportedArityError,
)
from esil_ir.instructions import render
from esil_ir.operators import OPERATOR_TABLE, Arity, Operator
from esil_ir.parser import EsilParser, ParseStatus, TemporaryAllocator, translate
from esil_ir.values import Location


# =============================================================================
# Helper Functions
# =============================================================================

def lines(esil: str) -> list[str]:
    """Translate with a fresh parser and return the rendered instructions."""
    parser = EsilParser()
    parser.parse(esil)
    return render(parser.emit_instructions())


# =============================================================================
# Operand Tests
# =============================================================================

class TestOperands:
    """Test operand tokens pushed onto the stack."""

    def setup_method(self):
        self.parser = EsilParser()

    def test_register_operand(self):
        """Known registers take their width from the register table."""
        self.parser.parse("rax")
        (value,) = self.parser.stack
        assert value.location == Location.REGISTER
        assert value.size == 64

    def test_constant_operand(self):
        """Decimal literals become constants."""
        self.parser.parse("-42")
        (value,) = self.parser.stack
        assert value.location == Location.CONSTANT
        assert value.value == -42

    def test_unknown_operand(self):
        """Names outside the register table are unknown."""
        self.parser.parse("eax")
        (value,) = self.parser.stack
        assert value.location == Location.UNKNOWN
        assert value.size == 64

    def test_dereference_token_is_unknown(self):
        """Dereference markers get no memory semantics."""
        self.parser.parse("[8]")
        assert self.parser.stack[0].location == Location.UNKNOWN

    def test_operands_emit_nothing(self):
        """Pushing operands emits no instructions."""
        result = self.parser.parse("rax,rbx,1")
        assert result.ok
        assert result.instructions == []
        assert [v.name for v in self.parser.stack] == ["rax", "rbx", "1"]

    def test_empty_expression(self):
        """An empty expression is a single empty unknown operand."""
        self.parser.parse("")
        (value,) = self.parser.stack
        assert value.name == ""
        assert value.location == Location.UNKNOWN

    def test_default_size_override(self):
        """Constants and unknown operands use the configured width."""
        parser = EsilParser(default_size=32)
        parser.parse("eax,7,rax")
        assert [v.size for v in parser.stack] == [32, 32, 64]


# =============================================================================
# Operator Tests
# =============================================================================

class TestOperators:
    """Test evaluation of single operators."""

    def setup_method(self):
        self.parser = EsilParser()

    def test_binary_operand_order(self):
        """Operands keep their left-to-right source order."""
        result = self.parser.parse("a,b,+")
        (inst,) = result.instructions
        assert inst.operand_1.name == "a"
        assert inst.operand_2.name == "b"
        assert inst.destination.name == "tmp_1"
        assert inst.destination.location == Location.TEMPORARY

    def test_binary_result_pushed(self):
        """The temporary result replaces both operands on the stack."""
        self.parser.parse("a,b,+")
        assert [v.name for v in self.parser.stack] == ["tmp_1"]

    def test_chained_operators(self):
        """Results feed later operators."""
        assert lines("1,2,+,3,*") == [
            "tmp_1 = 1 + 2",
            "tmp_2 = tmp_1 * 3",
        ]

    @pytest.mark.parametrize("symbol", ["==", "<", ">", "<=", ">=", "<<", ">>",
                                        "&", "|", "*", "^", "+", "-", "/", "%"])
    def test_every_binary_operator(self, symbol):
        """Every binary operator renders in infix form."""
        assert lines(f"x,y,{symbol}") == [f"tmp_1 = x {symbol} y"]

    def test_unary_operator(self):
        """Unary operators fill the first slot and leave the second null."""
        result = self.parser.parse("rax,!")
        (inst,) = result.instructions
        assert inst.operand_1.name == "rax"
        assert inst.operand_2.is_null
        assert str(inst) == "tmp_1 = rax ! "

    def test_conditional_block(self):
        """'?{' consumes the condition, '}' consumes the value before it."""
        result = self.parser.parse("zf,?{,rax,1,=,}")
        assert render(result.instructions) == [
            "tmp_1 = zf ?{ ",
            "rax = 1",
            "tmp_2 =  } ",
        ]
        assert result.instructions[2].operand_1.is_null
        assert [v.name for v in self.parser.stack] == ["tmp_1", "tmp_2"]

    def test_block_close_consumes_one_value(self):
        """'}' pops exactly one value into the first slot."""
        result = self.parser.parse("rax,rbx,}")
        (inst,) = result.instructions
        assert inst.operand_1.name == "rbx"
        assert inst.operand_2.is_null
        assert [v.name for v in self.parser.stack] == ["rax", "tmp_1"]

    def test_operator_match_is_exact(self):
        """A token is only an operator on an exact match."""
        self.parser.parse("a,+ ")
        assert self.parser.emit_instructions() == []
        assert self.parser.stack[-1].name == "+ "


# =============================================================================
# Assignment Tests
# =============================================================================

class TestAssignment:
    """Test the '=' operator and composite operators."""

    def test_plain_assignment(self):
        """Assignment renders in two-operand form."""
        assert lines("rax,rbx,=") == ["rax = rbx"]

    def test_assignment_allocates_no_temporary(self):
        """Assignments have a null destination and use no temporary."""
        parser = EsilParser()
        result = parser.parse("rax,1,=")
        (inst,) = result.instructions
        assert inst.is_assignment
        assert inst.destination.is_null
        assert parser.temporary_count == 0

    def test_assignment_pushes_null(self):
        """The null destination is pushed like any other result."""
        parser = EsilParser()
        parser.parse("rax,1,=")
        (value,) = parser.stack
        assert value.is_null

    def test_composite_add(self):
        """'+=' computes into a temporary, then assigns it back."""
        assert lines("a,b,+=") == ["tmp_1 = a + b", "a = tmp_1"]

    def test_composite_xor_unknown_registers(self):
        """Unknown register names still work as assignment targets."""
        parser = EsilParser()
        result = parser.parse("eax,ebx,^=")
        assert render(result.instructions) == ["tmp_1 = eax ^ ebx", "eax = tmp_1"]
        operation = result.instructions[0]
        assert operation.operand_1.location == Location.UNKNOWN
        assert operation.operand_2.location == Location.UNKNOWN
        assert operation.operand_1.size == 64

    def test_separate_assignment_after_xor(self):
        """With '^' and '=' as separate tokens, '=' finds only the result."""
        parser = EsilParser()
        result = parser.parse("eax,ebx,^,=")
        assert render(result.instructions) == ["tmp_1 = eax ^ ebx"]
        assert result.status == ParseStatus.PARTIAL
        (diag,) = result.diagnostics
        assert diag.kind == DiagnosticKind.STACK_UNDERFLOW
        assert diag.position == 3
        assert diag.token == "="
        assert [v.name for v in parser.stack] == ["tmp_1"]

    def test_composite_shift(self):
        """Multi-character operators expand too."""
        assert lines("rax,4,<<=") == ["tmp_1 = rax << 4", "rax = tmp_1"]

    def test_composite_unary(self):
        """A unary composite assigns back to its only operand."""
        assert lines("rcx,--=") == ["tmp_1 = rcx -- ", "rcx = tmp_1"]

    def test_composite_with_constant(self):
        """The first operand is the target of a composite."""
        assert lines("rsp,8,-=") == ["tmp_1 = rsp - 8", "rsp = tmp_1"]

    def test_comparison_operators_are_not_composite(self):
        """'==', '<=' and '>=' are operators in their own right."""
        assert lines("a,b,==,c,d,<=,e,f,>=") == [
            "tmp_1 = a == b",
            "tmp_2 = c <= d",
            "tmp_3 = e >= f",
        ]

    def test_composite_leaves_null_on_stack(self):
        """After a composite only the assignment's null result remains."""
        parser = EsilParser()
        parser.parse("a,b,+=")
        (value,) = parser.stack
        assert value.is_null


# =============================================================================
# Stack Underflow Tests
# =============================================================================

class TestStackUnderflow:
    """Test operators applied to a stack that is too shallow."""

    def test_operator_on_empty_stack(self):
        """A lone operator emits nothing and leaves the stack empty."""
        parser = EsilParser()
        result = parser.parse("+")
        assert result.status == ParseStatus.PARTIAL
        assert result.instructions == []
        assert parser.stack == []

    def test_underflow_diagnostic(self):
        """The diagnostic names the token and its position."""
        result = EsilParser().parse("rax,+")
        (diag,) = result.diagnostics
        assert diag.kind == DiagnosticKind.STACK_UNDERFLOW
        assert diag.token == "+"
        assert diag.position == 1
        assert "stack holds 1" in diag.message

    def test_underflow_keeps_stack(self):
        """Operands are not consumed when the operator cannot run."""
        parser = EsilParser()
        parser.parse("rax,+")
        assert [v.name for v in parser.stack] == ["rax"]

    def test_parsing_continues_after_underflow(self):
        """Tokens after an underflow are still translated."""
        parser = EsilParser()
        result = parser.parse("+,a,b,-")
        assert result.status == ParseStatus.PARTIAL
        assert render(result.instructions) == ["tmp_1 = a - b"]
        assert result.tokens_consumed == 4

    def test_unary_on_empty_stack(self):
        """Unary operators underflow on an empty stack."""
        result = EsilParser().parse("!")
        assert result.diagnostics[0].kind == DiagnosticKind.STACK_UNDERFLOW

    def test_block_close_on_empty_stack(self):
        """'}' underflows on an empty stack."""
        parser = EsilParser()
        result = parser.parse("}")
        assert result.status == ParseStatus.PARTIAL
        assert parser.emit_instructions() == []

    def test_composite_underflow(self):
        """A composite without enough operands is skipped."""
        parser = EsilParser()
        result = parser.parse("rax,+=")
        assert result.status == ParseStatus.PARTIAL
        assert result.instructions == []
        assert [v.name for v in parser.stack] == ["rax"]

    def test_instruction_count_matches_applied_operators(self):
        """Only operators that found their operands emit instructions."""
        parser = EsilParser()
        result = parser.parse("1,2,3,+,*,-")
        assert len(result.instructions) == 2
        assert len(result.diagnostics) == 1
        assert len(parser.stack) == 1


# =============================================================================
# Unknown Operator Tests
# =============================================================================

class TestUnknownOperator:
    """Test composite tokens with pieces that are not operators."""

    def test_unknown_composite_fails(self):
        """An unknown composite stops the translation."""
        parser = EsilParser()
        result = parser.parse("a,b,x=,c,d,+")
        assert result.status == ParseStatus.FAILED
        assert result.instructions == []
        assert result.tokens_consumed == 2
        assert [v.name for v in parser.stack] == ["a", "b"]

    def test_unknown_composite_diagnostic(self):
        """The diagnostic carries the composite token and its position."""
        result = EsilParser().parse("a,b,x=")
        (diag,) = result.diagnostics
        assert diag.kind == DiagnosticKind.UNKNOWN_OPERATOR
        assert diag.token == "x="
        assert diag.position == 2
        assert diag.error.operator == "x"

    def test_earlier_pieces_are_kept(self):
        """Pieces before the unknown one have already been translated."""
        result = EsilParser().parse("a,b,+==")
        assert result.status == ParseStatus.FAILED
        assert render(result.instructions) == ["tmp_1 = a + b", "a = tmp_1"]

    def test_leading_assignment_fails(self):
        """'=+' starts with an empty piece, which is not an operator."""
        result = EsilParser().parse("a,b,=+")
        assert result.status == ParseStatus.FAILED
        assert result.diagnostics[0].error.operator == ""

    def test_later_calls_still_work(self):
        """A failed call does not poison the parser."""
        parser = EsilParser()
        parser.parse("x=")
        result = parser.parse("a,b,+")
        assert result.ok


# =============================================================================
# Outcome and Strict Mode Tests
# =============================================================================

class TestOutcomes:
    """Test ParseResult reporting and strict mode."""

    def test_success(self):
        """A clean translation reports SUCCESS."""
        result = EsilParser().parse("rax,rbx,+=")
        assert result.ok
        assert result.status == ParseStatus.SUCCESS
        assert result.diagnostics == []
        assert result.tokens_consumed == 3

    def test_raise_for_status_success(self):
        """raise_for_status() returns the result when there is no problem."""
        result = EsilParser().parse("a,b,+")
        assert result.raise_for_status() is result

    def test_raise_for_status_partial(self):
        """raise_for_status() raises the first recorded problem."""
        result = EsilParser().parse("+,-")
        with pytest.raises(StackUnderflowError) as exc_info:
            result.raise_for_status()
        assert exc_info.value.operator == "+"

    def test_strict_underflow(self):
        """Strict parsers raise on underflow."""
        with pytest.raises(StackUnderflowError):
            EsilParser(strict=True).parse("rax,+")

    def test_strict_unknown_operator(self):
        """Strict parsers raise on unknown composite pieces."""
        with pytest.raises(UnknownOperatorError) as exc_info:
            EsilParser(strict=True).parse("rax,rbx,@=")
        assert "unknown operator '@'" in str(exc_info.value)

    def test_ternary_operator_unsupported(self):
        """Ternary operators have no three-operand form."""
        table = dict(OPERATOR_TABLE)
        table["?:"] = Operator("?:", Arity.TERNARY)
        parser = EsilParser(operators=table)
        result = parser.parse("a,b,c,?:")
        assert result.status == ParseStatus.PARTIAL
        assert result.diagnostics[0].kind == DiagnosticKind.UNSUPPORTED_ARITY
        assert len(parser.stack) == 3

    def test_strict_ternary(self):
        """Strict parsers raise on ternary operators."""
        table = {"?:": Operator("?:", Arity.TERNARY)}
        with pytest.raises(UnsupportedArityError):
            EsilParser(operators=table, strict=True).parse("a,b,c,?:")

    def test_result_to_dict(self):
        """Results serialize with status, instructions and diagnostics."""
        data = EsilParser().parse("a,+").to_dict()
        assert data["status"] == "partial"
        assert data["instructions"] == []
        assert data["diagnostics"][0]["kind"] == "stack-underflow"
        assert data["diagnostics"][0]["position"] == 1


# =============================================================================
# Parser State Tests
# =============================================================================

class TestParserState:
    """Test state carried across parse() calls."""

    def test_instructions_accumulate(self):
        """Instructions from every call are kept in order."""
        parser = EsilParser()
        parser.parse("a,b,+")
        second = parser.parse("c,d,-")
        assert render(second.instructions) == ["tmp_2 = c - d"]
        assert render(parser.emit_instructions()) == [
            "tmp_1 = a + b",
            "tmp_2 = c - d",
        ]

    def test_stack_carries_over(self):
        """Values left by one call are operands for the next."""
        parser = EsilParser()
        parser.parse("a,b,+")
        result = parser.parse("c,*")
        assert render(result.instructions) == ["tmp_2 = tmp_1 * c"]

    def test_temporary_names_are_hex(self):
        """Temporary indices are written in lowercase hexadecimal."""
        parser = EsilParser()
        parser.parse("0" + ",1,+" * 16)
        names = [inst.destination.name for inst in parser.emit_instructions()]
        assert names[9] == "tmp_a"
        assert names[15] == "tmp_10"
        assert len(set(names)) == 16

    def test_emit_instructions_returns_copy(self):
        """Changing the returned list does not change the parser."""
        parser = EsilParser()
        parser.parse("a,b,+")
        emitted = parser.emit_instructions()
        emitted.clear()
        assert len(parser.emit_instructions()) == 1

    def test_stack_returns_copy(self):
        """Changing the returned stack does not change the parser."""
        parser = EsilParser()
        parser.parse("a,b")
        parser.stack.clear()
        assert len(parser.stack) == 2

    def test_parsers_are_independent(self):
        """Each parser has its own temporary counter."""
        first = EsilParser()
        second = EsilParser()
        first.parse("a,b,+")
        result = second.parse("c,d,+")
        assert result.instructions[0].destination.name == "tmp_1"

    def test_flag_update_expression(self):
        """A typical x86 compare-and-set-flags expression."""
        parser = EsilParser()
        result = parser.parse(
            "0,0x204db1,rip,+,[1],==,%z,zf,=,%b8,cf,=,%p,pf,=,%s,sf,="
        )
        assert result.ok
        assert render(result.instructions) == [
            "tmp_1 = 0x204db1 + rip",
            "tmp_2 = tmp_1 == [1]",
            "%z = zf",
            "%b8 = cf",
            "%p = pf",
            "%s = sf",
        ]
        assert len(parser.stack) == 6


# =============================================================================
# Temporary Allocator Tests
# =============================================================================

class TestTemporaryAllocator:
    """Test temporary index allocation."""

    def test_starts_at_one(self):
        allocator = TemporaryAllocator()
        assert allocator.last_index == 0
        assert allocator.allocate().name == "tmp_1"

    def test_strictly_increasing(self):
        allocator = TemporaryAllocator()
        names = [allocator.allocate().name for _ in range(3)]
        assert names == ["tmp_1", "tmp_2", "tmp_3"]
        assert allocator.last_index == 3


# =============================================================================
# Convenience Function Tests
# =============================================================================

class TestTranslate:
    """Test the translate() shortcut."""

    def test_translate(self):
        result = translate("rsp,8,+=")
        assert render(result.instructions) == ["tmp_1 = rsp + 8", "rsp = tmp_1"]

    def test_translate_strict(self):
        with pytest.raises(StackUnderflowError):
            translate("+", strict=True)
