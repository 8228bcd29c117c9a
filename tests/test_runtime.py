"""
Tests for the anglescript runtime (cells, heap, operation chains, units,
call stack, system commands).
"""

import pytest

from anglescript import (
    TypeMismatchError, UnknownReferenceError, InvalidOperatorError,
    UnknownCommandError, InvalidConstructionError, StatementSyntaxError,
)
from anglescript.lexer import tokenize
from anglescript.runtime import (
    Pointer, Integer, CharacterCollection, make_cell,
    derive_identifier, is_strict_integer,
    Heap,
    ExecutableUnit, UnitResult,
    Operator, OperationPair, LiteralOperand, ReferenceOperand,
    create_int_pair, create_string_pair, pairs_from_tokens,
    build_integer_chain, build_string_chain, build_inline_chain,
    CommandRegistry, SystemCommand, get_command_registry, make_system_command,
    CallStack,
)


def lit(value, operator=Operator.EQUAL):
    return OperationPair(LiteralOperand(value), operator)


# --- Value Cell Tests ---

class TestValueCells:
    """Test Integer and CharacterCollection cells."""

    def test_integer_value(self):
        """An Integer holds its value, id and type name."""
        cell = Integer(42, "id")
        assert cell.get_value() == 42
        assert cell.get_id() == "id"
        assert cell.type_name == "int"

    def test_integer_accepts_integral_float(self):
        """A float without fractional part is an integer."""
        cell = Integer(3.0, "id")
        assert cell.get_value() == 3
        assert isinstance(cell.get_value(), int)

    @pytest.mark.parametrize("bad", [3.5, "3", True, None, [1]])
    def test_integer_rejects_non_integers(self, bad):
        """Fractions, text, bools and other objects are rejected."""
        with pytest.raises(TypeMismatchError) as exc_info:
            Integer(bad, "id")
        assert exc_info.value.code == "E201"

    def test_failed_set_keeps_old_value(self):
        """A rejected set_value leaves the cell unchanged."""
        cell = Integer(5, "id")
        with pytest.raises(TypeMismatchError):
            cell.set_value("five")
        assert cell.get_value() == 5

    def test_integer_default_is_zero(self):
        """A new Integer starts at 0."""
        assert Integer(id="id").get_value() == 0

    def test_string_value(self):
        """A CharacterCollection holds text and starts empty."""
        cell = CharacterCollection("hi", "id")
        assert cell.get_value() == "hi"
        assert cell.type_name == "string"
        assert CharacterCollection(id="id").get_value() == ""

    def test_string_rejects_non_text(self):
        """Only str values fit a text cell."""
        with pytest.raises(TypeMismatchError):
            CharacterCollection(5, "id")

    def test_pointer_not_constructible(self):
        """The abstract base cannot be instantiated."""
        with pytest.raises(InvalidConstructionError) as exc_info:
            Pointer("id")
        assert exc_info.value.code == "E601"

    def test_pass_by_value_is_independent(self):
        """Changing a copy never changes the original, and vice versa."""
        original = Integer(1, "a", name="x")
        copy = original.pass_by_value("b")
        assert isinstance(copy, Integer)
        assert copy.get_id() == "b"
        assert copy.name == "x"
        assert copy.get_value() == 1

        copy.set_value(99)
        assert original.get_value() == 1
        original.set_value(2)
        assert copy.get_value() == 99

    def test_string_pass_by_value(self):
        """Text cells copy into independent text cells."""
        original = CharacterCollection("abc", "a")
        copy = original.pass_by_value("b")
        assert isinstance(copy, CharacterCollection)
        copy.set_value("xyz")
        assert original.get_value() == "abc"

    def test_make_cell(self):
        """make_cell picks the variant and derives the id from the name."""
        cell = make_cell("string", "greeting")
        assert isinstance(cell, CharacterCollection)
        assert cell.id == derive_identifier("greeting")
        assert cell.name == "greeting"


class TestIdentifiers:
    """Test identifier derivation and literal checks."""

    def test_derive_identifier_is_stable(self):
        """The same name always gives the same identifier."""
        assert derive_identifier("x") == derive_identifier("x")

    def test_derive_identifier_distinguishes_names(self):
        """Different names, including case, give different identifiers."""
        assert derive_identifier("x") != derive_identifier("y")
        assert derive_identifier("ab") != derive_identifier("aB")

    @pytest.mark.parametrize("text,expected", [
        ("42", True),
        ("007", True),
        ("-1", False),
        ("1.0", False),
        ("0x1", False),
        ("", False),
        ("1e3", False),
        ("12\n", False),
        ("\u0661\u0662", False),  # Arabic-Indic digits
        ("\uff13", False),        # fullwidth 3
    ])
    def test_is_strict_integer(self, text, expected):
        """Only unsigned runs of ASCII digits count."""
        assert is_strict_integer(text) is expected


# --- Heap Tests ---

class TestHeap:
    """Test the named-variable store."""

    def test_put_get(self):
        """A stored cell is found by its identifier."""
        heap = Heap()
        cell = Integer(1, "a")
        heap.put(cell)
        assert heap.get("a") is cell
        assert "a" in heap
        assert len(heap) == 1

    def test_get_unknown(self):
        """Unknown identifiers raise E302."""
        with pytest.raises(UnknownReferenceError) as exc_info:
            Heap().get("missing")
        assert exc_info.value.code == "E302"

    def test_put_overwrites(self):
        """A second cell with the same identifier replaces the first."""
        heap = Heap()
        heap.put(Integer(1, "a"))
        second = Integer(2, "a")
        heap.put(second)
        assert len(heap) == 1
        assert heap.get("a") is second

    def test_remove(self):
        """Removing twice is harmless."""
        heap = Heap()
        heap.put(Integer(1, "a"))
        heap.remove("a")
        heap.remove("a")
        assert "a" not in heap

    def test_clear(self):
        """clear() empties the heap."""
        heap = Heap()
        heap.put(Integer(1, "a"))
        heap.put(Integer(2, "b"))
        heap.clear()
        assert len(heap) == 0

    def test_lookup_by_name(self):
        """lookup() raises E301 for undeclared names, find() returns None."""
        heap = Heap()
        cell = make_cell("int", "count")
        heap.put(cell)
        assert heap.lookup("count") is cell
        assert heap.find("other") is None
        with pytest.raises(UnknownReferenceError) as exc_info:
            heap.lookup("other")
        assert exc_info.value.code == "E301"

    def test_snapshot(self):
        """Named cells appear under their name, others under their id."""
        heap = Heap()
        heap.put(make_cell("int", "x"))
        heap.put(CharacterCollection("t", "transient:0"))
        assert heap.snapshot() == {"x": 0, "transient:0": "t"}


# --- Operation Tests ---

class TestOperationPairs:
    """Test pair factories."""

    def test_int_pair_from_text(self):
        """Integer literal text becomes an int operand."""
        pair = create_int_pair("+", "5")
        assert pair.operator is Operator.ADD
        assert pair.get_value() == 5

    def test_int_pair_rejects_non_integer(self):
        """Decimal text is not an integer literal."""
        with pytest.raises(TypeMismatchError):
            create_int_pair("+", "1.5")

    def test_int_pair_rejects_non_ascii_digits(self):
        """Digits outside 0-9 are not integer literals."""
        with pytest.raises(TypeMismatchError) as exc_info:
            create_int_pair("+", "\u0663")
        assert exc_info.value.code == "E201"

    def test_unknown_symbol(self):
        """Symbols other than = + - * raise E402."""
        with pytest.raises(InvalidOperatorError) as exc_info:
            create_int_pair("/", "5")
        assert exc_info.value.code == "E402"

    def test_string_pair(self):
        """String pairs keep their text as is."""
        pair = create_string_pair("=", "abc")
        assert pair.operator is Operator.EQUAL
        assert pair.value == "abc"

    @pytest.mark.parametrize("symbol", ["-", "*"])
    def test_string_pair_rejects_arithmetic(self, symbol):
        """Strings only support = and +."""
        with pytest.raises(TypeMismatchError) as exc_info:
            create_string_pair(symbol, "a")
        assert exc_info.value.code == "E202"

    def test_pairs_from_tokens(self):
        """Operators apply to the operand that follows them."""
        pairs = pairs_from_tokens(
            tokenize("1 + 2 - 3 * 4"),
            lambda t: LiteralOperand(t.value),
            create_int_pair,
        )
        assert [p.operator for p in pairs] == [
            Operator.EQUAL, Operator.ADD, Operator.SUBTRACT, Operator.MULTIPLY,
        ]
        assert [p.value for p in pairs] == [1, 2, 3, 4]

    def test_leading_operator_rejected(self):
        """An expression cannot start with an operator."""
        with pytest.raises(StatementSyntaxError) as exc_info:
            pairs_from_tokens(tokenize("+ 1"), lambda t: LiteralOperand(t.value),
                              create_int_pair)
        assert exc_info.value.code == "E106"

    def test_trailing_operator_rejected(self):
        """An expression cannot end with an operator."""
        with pytest.raises(StatementSyntaxError) as exc_info:
            pairs_from_tokens(tokenize("1 +"), lambda t: LiteralOperand(t.value),
                              create_int_pair)
        assert exc_info.value.code == "E106"


class TestChains:
    """Test integer, string and inline operation chains."""

    def test_integer_chain(self):
        """3 + 4 is written to the destination."""
        dest = Integer(0, "x")
        result = build_integer_chain(dest, lit(3), lit(4, Operator.ADD))()
        assert result == UnitResult(7, emit=False)
        assert dest.get_value() == 7

    def test_left_to_right(self):
        """No precedence: 2 + 3 * 4 is 20."""
        dest = Integer(0, "x")
        build_integer_chain(
            dest, lit(2), lit(3, Operator.ADD), lit(4, Operator.MULTIPLY),
        )()
        assert dest.get_value() == 20

    def test_subtract_below_zero(self):
        """Results may be negative."""
        dest = Integer(0, "x")
        build_integer_chain(dest, lit(1), lit(5, Operator.SUBTRACT))()
        assert dest.get_value() == -4

    def test_equal_replaces(self):
        """EQUAL anywhere in the chain replaces the accumulator."""
        dest = Integer(0, "x")
        build_integer_chain(dest, lit(1), lit(9, Operator.EQUAL))()
        assert dest.get_value() == 9

    def test_invalid_operator_at_run(self):
        """A pair with no known operator fails with E401 when run."""
        dest = Integer(0, "x")
        chain = build_integer_chain(dest, OperationPair(LiteralOperand(1), "bogus"))
        with pytest.raises(InvalidOperatorError) as exc_info:
            chain()
        assert exc_info.value.code == "E401"

    def test_string_chain(self):
        """Strings concatenate."""
        dest = CharacterCollection("", "s")
        result = build_string_chain(dest, lit("a"), lit("b", Operator.ADD))()
        assert result.value == "ab"
        assert dest.get_value() == "ab"

    def test_string_chain_rejects_subtract(self):
        """SUBTRACT in a string chain fails when run."""
        dest = CharacterCollection("", "s")
        chain = build_string_chain(dest, lit("a"), lit("b", Operator.SUBTRACT))
        with pytest.raises(InvalidOperatorError):
            chain()

    def test_wrong_destination_type(self):
        """Writing an int into a text cell fails when run."""
        chain = build_integer_chain(CharacterCollection("", "s"), lit(1))
        with pytest.raises(TypeMismatchError):
            chain()

    def test_references_read_lazily(self):
        """A reference sees the cell value at run time, not build time."""
        source = Integer(1, "a")
        dest = Integer(0, "b")
        chain = build_integer_chain(
            dest, OperationPair(ReferenceOperand(source), Operator.EQUAL),
        )
        source.set_value(10)
        assert chain().value == 10

    def test_inline_chain_converts_to_text(self):
        """Inline chains turn every operand into text."""
        dest = CharacterCollection("", "t")
        count = Integer(7, "c")
        result = build_inline_chain(
            dest,
            lit("count: "),
            OperationPair(ReferenceOperand(count), Operator.ADD),
            lit(1, Operator.ADD),
        )()
        assert result.value == "count: 71"


# --- Unit, Command and Call Stack Tests ---

class TestExecutableUnit:
    """Test executable units."""

    def test_execute(self):
        """execute() returns the evaluator's result."""
        unit = ExecutableUnit(["a"], lambda: UnitResult(5))
        assert unit.execute() == UnitResult(5, emit=False)

    def test_dependencies_are_copied(self):
        """Callers cannot change a unit's dependency list."""
        unit = ExecutableUnit(["a", "b"], lambda: UnitResult(None))
        deps = unit.get_dependencies()
        deps.append("c")
        assert unit.get_dependencies() == ["a", "b"]


class TestSystemCommands:
    """Test the system command registry."""

    def test_output_forces_emit(self):
        """output marks its inner result for emission."""
        inner = ExecutableUnit([], lambda: UnitResult("hello", emit=False))
        result = make_system_command("output", inner)()
        assert result == UnitResult("hello", emit=True)

    def test_unknown_command(self):
        """Unknown names raise E501 listing the available commands."""
        inner = ExecutableUnit([], lambda: UnitResult("x"))
        with pytest.raises(UnknownCommandError) as exc_info:
            make_system_command("print", inner)
        assert exc_info.value.code == "E501"
        assert "output" in exc_info.value.diagnostic.hints[0]

    def test_registry_is_shared(self):
        """The global registry is created once and only knows output."""
        assert get_command_registry() is get_command_registry()
        assert get_command_registry().names == ["output"]

    def test_register_command(self):
        """Commands registered on a private registry stay private."""
        registry = CommandRegistry()
        registry.register(SystemCommand(
            name="twice",
            implementation=lambda inner: lambda: UnitResult(inner.execute().value * 2, True),
        ))
        inner = ExecutableUnit([], lambda: UnitResult("ab"))
        assert registry.make("twice", inner)().value == "abab"
        assert not get_command_registry().has_command("twice")


class TestCallStack:
    """Test ordered execution."""

    def test_runs_in_order_and_emits(self):
        """Units run first in, first out; emitted values are forwarded."""
        calls = []

        def unit(name, emit):
            def run():
                calls.append(name)
                return UnitResult(name, emit)
            return ExecutableUnit([], run)

        stack = CallStack()
        stack.add(unit("a", False))
        stack.add(unit("b", True))
        stack.add(unit("c", True))

        emitted = []
        assert stack.execute(emitted.append) == ["b", "c"]
        assert emitted == ["b", "c"]
        assert calls == ["a", "b", "c"]

    def test_error_aborts_remaining(self):
        """The first failure stops the run without rolling back."""
        calls = []
        dest = Integer(0, "x")

        stack = CallStack()
        stack.add(ExecutableUnit([], build_integer_chain(dest, lit(1))))
        stack.add(ExecutableUnit([], build_integer_chain(CharacterCollection("", "s"), lit(1))))
        stack.add(ExecutableUnit([], lambda: calls.append("ran") or UnitResult(None)))

        with pytest.raises(TypeMismatchError):
            stack.execute()
        assert calls == []
        assert dest.get_value() == 1

    def test_clear(self):
        """A cleared stack runs nothing."""
        stack = CallStack()
        stack.add(ExecutableUnit([], lambda: UnitResult(None)))
        stack.clear()
        assert len(stack) == 0
        assert stack.execute() == []
