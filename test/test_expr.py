"""
Evaluation of AST nodes built directly, without the parser
"""

import pytest

from data import IntData, StringData, BoolData, ListData, FunctionData, NONE
from error_handling import (
  ArityMismatchError, DivisionByZeroError, IOFailureError, NotAFunctionError,
  TypeMismatchError, UndefinedVariableError
)
from expr import (
  AddString, Arithmetics, Assign, Block, BoolLiteral, Compare, Comparator, Declare, Deref,
  ForLoop, Ifelse, IntLiteral, Invoke, LogicalAndExpr, LogicalNotExpr, LogicalOrExpr,
  NegationExpr, NoneLiteral, Operator, PrintExpr, ReadFileExpr, SplitStringExpr,
  StringLiteral, TernaryExpr
)


def num(n):
  return IntLiteral(n)


def text(s):
  return StringLiteral(s)


class Boom(IntLiteral):
  """Literal that fails when evaluated, for laziness checks"""

  def __init__(self):
    super().__init__(0)

  def eval(self, env):
    raise AssertionError("branch should not have been evaluated")


class Counter(IntLiteral):
  """Literal that counts its evaluations"""

  def __init__(self, value):
    super().__init__(value)
    self.calls = 0

  def eval(self, env):
    self.calls += 1
    return super().eval(env)


class TestLiterals:

  def test_literals(self, env):
    assert num(7).eval(env) == IntData(7)
    assert text("hi").eval(env) == StringData("hi")
    assert BoolLiteral(True).eval(env) == BoolData(True)
    assert NoneLiteral().eval(env) == NONE

  def test_string_literal_value(self):
    assert text("abc").get_value() == "abc"

  def test_repeated_evaluation_is_stable(self, env):
    node = Arithmetics(Operator.Mul, Arithmetics(Operator.Add, num(2), num(3)), num(4))
    assert node.eval(env) == node.eval(env) == IntData(20)


class TestVariables:

  def test_assign_returns_value_and_binds(self, env):
    assert Assign("x", num(3)).eval(env) == IntData(3)
    assert Deref("x").eval(env) == IntData(3)

  def test_deref_undefined(self, env):
    with pytest.raises(UndefinedVariableError):
      Deref("nope").eval(env)

  def test_assign_updates_outer_scope(self, env):
    env.define("count", IntData(1))
    inner = env.child_scope()
    Assign("count", num(2)).eval(inner)
    assert env.lookup("count") == IntData(2)


class TestArithmetics:

  @pytest.mark.parametrize("a, b", [(3, 4), (-10, 3), (0, 0), (2**40, 5)])
  def test_int_add_and_sub(self, env, a, b):
    assert Arithmetics(Operator.Add, num(a), num(b)).eval(env) == IntData(a + b)
    assert Arithmetics(Operator.Sub, num(a), num(b)).eval(env) == IntData(a - b)

  def test_mul(self, env):
    assert Arithmetics(Operator.Mul, num(6), num(7)).eval(env) == IntData(42)

  @pytest.mark.parametrize("a, b, expected", [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3), (6, 3, 2)])
  def test_division_truncates_toward_zero(self, env, a, b, expected):
    assert Arithmetics(Operator.Div, num(a), num(b)).eval(env) == IntData(expected)

  def test_division_by_zero(self, env):
    with pytest.raises(DivisionByZeroError):
      Arithmetics(Operator.Div, num(1), num(0)).eval(env)

  def test_add_with_string_concatenates_text(self, env):
    assert Arithmetics(Operator.Add, text("a"), num(1)).eval(env) == StringData("a1")
    assert Arithmetics(Operator.Add, num(1), text("a")).eval(env) == StringData("1a")
    assert Arithmetics(Operator.Add, text("x"), BoolLiteral(True)).eval(env) == StringData("xtrue")

  def test_add_bools_is_type_mismatch(self, env):
    with pytest.raises(TypeMismatchError) as excinfo:
      Arithmetics(Operator.Add, BoolLiteral(True), num(1)).eval(env)
    assert excinfo.value.operation == "+"
    assert excinfo.value.operands == "Bool, Int"

  @pytest.mark.parametrize("op", [Operator.Sub, Operator.Div])
  def test_sub_and_div_reject_strings(self, env, op):
    with pytest.raises(TypeMismatchError):
      Arithmetics(op, text("10"), num(2)).eval(env)

  @pytest.mark.parametrize("count", [0, 1, 3])
  def test_string_repetition(self, env, count):
    assert Arithmetics(Operator.Mul, text("ab"), num(count)).eval(env) == StringData("ab" * count)
    assert Arithmetics(Operator.Mul, num(count), text("ab")).eval(env) == StringData("ab" * count)

  def test_negative_repetition_is_empty(self, env):
    assert Arithmetics(Operator.Mul, text("ab"), num(-2)).eval(env) == StringData("")

  def test_string_times_string_is_type_mismatch(self, env):
    with pytest.raises(TypeMismatchError):
      Arithmetics(Operator.Mul, text("a"), text("b")).eval(env)


class TestAddString:

  def test_concatenates_any_values(self, env):
    env.define("items", ListData([IntData(1), IntData(2)]))
    assert AddString(num(1), BoolLiteral(False)).eval(env) == StringData("1false")
    assert AddString(NoneLiteral(), Deref("items")).eval(env) == StringData("None[1, 2]")

  def test_hello_world(self, env):
    env.define("x", StringData("Hello"))
    env.define("y", StringData("World"))
    node = AddString(AddString(Deref("x"), text(" ")), Deref("y"))
    assert node.eval(env) == StringData("Hello World")


class TestCompare:

  @pytest.mark.parametrize("cmp, a, b, expected", [
      (Comparator.GT, 5, 3, True),
      (Comparator.GT, 3, 3, False),
      (Comparator.LT, 2, 3, True),
      (Comparator.EQ, 4, 4, True),
      (Comparator.EQ, 4, 5, False),
      (Comparator.GE, 3, 3, True),
      (Comparator.GE, 2, 3, False),
  ])
  def test_int_comparisons(self, env, cmp, a, b, expected):
    assert Compare(cmp, num(a), num(b)).eval(env) == BoolData(expected)

  def test_strings_are_not_comparable(self, env):
    with pytest.raises(TypeMismatchError):
      Compare(Comparator.EQ, text("a"), text("a")).eval(env)


class TestUnaryAndLogic:

  def test_negation(self, env):
    env.define("a", IntData(5))
    assert NegationExpr(Deref("a")).eval(env) == IntData(-5)

  def test_negation_of_string(self, env):
    with pytest.raises(TypeMismatchError):
      NegationExpr(text("5")).eval(env)

  def test_and_or_not(self, env):
    t, f = BoolLiteral(True), BoolLiteral(False)
    assert LogicalAndExpr(t, f).eval(env) == BoolData(False)
    assert LogicalAndExpr(t, t).eval(env) == BoolData(True)
    assert LogicalOrExpr(f, t).eval(env) == BoolData(True)
    assert LogicalOrExpr(f, f).eval(env) == BoolData(False)
    assert LogicalNotExpr(f).eval(env) == BoolData(True)

  def test_and_evaluates_both_operands(self, env):
    right = Counter(1)
    with pytest.raises(TypeMismatchError):
      LogicalAndExpr(BoolLiteral(False), right).eval(env)
    assert right.calls == 1

  def test_or_does_not_short_circuit(self, env):
    env.define("hits", IntData(0))
    bump = Block([Assign("hits", Arithmetics(Operator.Add, Deref("hits"), num(1))), BoolLiteral(True)])
    assert LogicalOrExpr(BoolLiteral(True), bump).eval(env) == BoolData(True)
    assert env.lookup("hits") == IntData(1)

  def test_not_requires_bool(self, env):
    with pytest.raises(TypeMismatchError):
      LogicalNotExpr(num(0)).eval(env)


class TestConditionals:

  def test_ternary_picks_branch_lazily(self, env):
    assert TernaryExpr(BoolLiteral(True), text("yes"), Boom()).eval(env) == StringData("yes")
    assert TernaryExpr(BoolLiteral(False), Boom(), text("no")).eval(env) == StringData("no")

  def test_ternary_condition_must_be_bool(self, env):
    with pytest.raises(TypeMismatchError):
      TernaryExpr(num(1), text("a"), text("b")).eval(env)

  def test_greater_than_five(self, env):
    env.define("x", IntData(10))
    node = TernaryExpr(Compare(Comparator.GT, Deref("x"), num(5)),
                       text("Greater than five"), text("Not greater than five"))
    assert node.eval(env) == StringData("Greater than five")

  def test_ifelse(self, env):
    node = Ifelse(BoolLiteral(False), Block([Boom()]), Block([num(2)]))
    assert node.eval(env) == IntData(2)

  def test_ifelse_condition_must_be_bool(self, env):
    with pytest.raises(TypeMismatchError):
      Ifelse(text("true"), Block([]), Block([])).eval(env)


class TestBlocksAndLoops:

  def test_block_returns_last_value(self, env):
    assert Block([num(1), num(2), text("last")]).eval(env) == StringData("last")

  def test_empty_block(self, env):
    assert Block([]).eval(env) == NONE

  def test_sum_loop(self, env):
    env.define("sum", IntData(0))
    body = Block([Assign("sum", Arithmetics(Operator.Add, Deref("sum"), Deref("i")))])
    ForLoop("i", num(10), num(20), body).eval(env)
    assert env.lookup("sum") == IntData(165)

  def test_loop_variable_visible_after_loop(self, env):
    ForLoop("i", num(1), num(3), Block([])).eval(env)
    assert env.lookup("i") == IntData(3)

  def test_loop_returns_last_body_value(self, env):
    assert ForLoop("i", num(1), num(4), Block([Deref("i")])).eval(env) == IntData(4)

  def test_empty_range(self, env):
    result = ForLoop("i", num(5), num(1), Block([Boom()])).eval(env)
    assert result == NONE
    assert "i" not in env

  def test_single_iteration(self, env):
    assert ForLoop("i", num(2), num(2), Block([Deref("i")])).eval(env) == IntData(2)

  def test_non_int_bounds_are_a_no_op(self, env):
    assert ForLoop("i", text("a"), Boom(), Block([Boom()])).eval(env) == NONE
    assert ForLoop("i", num(1), text("z"), Block([Boom()])).eval(env) == NONE

  def test_bounds_evaluated_once(self, env):
    start, end = Counter(1), Counter(3)
    ForLoop("i", start, end, Block([])).eval(env)
    assert (start.calls, end.calls) == (1, 1)


def factorial_program():
  """function factorial(n) { if (n > 1) { n * factorial(n - 1) } else { 1 } }"""
  body = Block([
      Ifelse(
          Compare(Comparator.GT, Deref("n"), num(1)),
          Block([Arithmetics(Operator.Mul, Deref("n"),
                             Invoke("factorial", [Arithmetics(Operator.Sub, Deref("n"), num(1))]))]),
          Block([num(1)]),
      )
  ])
  return Declare("factorial", ["n"], body)


class TestFunctions:

  def test_declare_binds_function_and_returns_none(self, env):
    assert Declare("id", ["x"], Deref("x")).eval(env) == NONE
    fn = env.lookup("id")
    assert isinstance(fn, FunctionData)
    assert fn.closure is env

  @pytest.mark.parametrize("n, expected", [(0, 1), (1, 1), (5, 120), (10, 3628800)])
  def test_recursive_factorial(self, env, n, expected):
    factorial_program().eval(env)
    assert Invoke("factorial", [num(n)]).eval(env) == IntData(expected)

  def test_closure_sees_later_mutation(self, env):
    Assign("base", num(1)).eval(env)
    Declare("get_base", [], Deref("base")).eval(env)
    Assign("base", num(42)).eval(env)
    assert Invoke("get_base", []).eval(env) == IntData(42)

  def test_parameters_shadow_globals(self, env):
    env.define("x", IntData(1))
    Declare("f", ["x"], Arithmetics(Operator.Mul, Deref("x"), num(2))).eval(env)
    assert Invoke("f", [num(21)]).eval(env) == IntData(42)
    assert env.lookup("x") == IntData(1)

  def test_body_assignment_to_global_writes_through(self, env):
    env.define("counter", IntData(0))
    Declare("bump", [], Assign("counter", Arithmetics(Operator.Add, Deref("counter"), num(1)))).eval(env)
    Invoke("bump", []).eval(env)
    Invoke("bump", []).eval(env)
    assert env.lookup("counter") == IntData(2)

  def test_locals_stay_in_call_scope(self, env):
    Declare("f", [], Block([Assign("tmp", num(5)), Deref("tmp")])).eval(env)
    assert Invoke("f", []).eval(env) == IntData(5)
    assert "tmp" not in env

  def test_arguments_evaluated_in_caller_scope(self, env):
    inner = env.child_scope({"v": IntData(7)})
    Declare("id", ["a"], Deref("a")).eval(env)
    assert Invoke("id", [Deref("v")]).eval(inner) == IntData(7)

  def test_uses_declaration_scope_not_call_scope(self, env):
    env.define("y", IntData(1))
    Declare("get_y", [], Deref("y")).eval(env)
    caller = env.child_scope({"y": IntData(100)})
    assert Invoke("get_y", []).eval(caller) == IntData(1)

  def test_arity_mismatch(self, env):
    Declare("pair", ["a", "b"], Deref("a")).eval(env)
    with pytest.raises(ArityMismatchError):
      Invoke("pair", [num(1), num(2), num(3)]).eval(env)

  def test_invoke_undefined(self, env):
    with pytest.raises(UndefinedVariableError):
      Invoke("ghost", []).eval(env)

  def test_invoke_non_function(self, env):
    env.define("five", IntData(5))
    with pytest.raises(NotAFunctionError) as excinfo:
      Invoke("five", []).eval(env)
    assert excinfo.value.name == "five"

  def test_errors_propagate_out_of_calls(self, env):
    Declare("bad", [], Arithmetics(Operator.Div, num(1), num(0))).eval(env)
    with pytest.raises(DivisionByZeroError):
      Block([num(1), Invoke("bad", [])]).eval(env)


class TestBuiltins:

  def test_print(self, env, output):
    assert PrintExpr(num(-5)).eval(env) == NONE
    PrintExpr(BoolLiteral(True)).eval(env)
    assert output.getvalue() == "-5\ntrue\n"

  def test_split(self, env):
    result = SplitStringExpr(text("a,b,c"), text(",")).eval(env)
    assert result == ListData([StringData("a"), StringData("b"), StringData("c")])

  def test_split_is_literal_not_regex(self, env):
    result = SplitStringExpr(text("1.2.3"), text(".")).eval(env)
    assert result == ListData([StringData("1"), StringData("2"), StringData("3")])

  def test_split_empty_input(self, env):
    assert SplitStringExpr(text(""), text(",")).eval(env) == ListData([StringData("")])

  def test_split_empty_delimiter(self, env):
    result = SplitStringExpr(text("ab"), text("")).eval(env)
    assert result == ListData([StringData(""), StringData("a"), StringData("b"), StringData("")])

  def test_split_requires_strings(self, env):
    with pytest.raises(TypeMismatchError):
      SplitStringExpr(text("a1b"), num(1)).eval(env)

  def test_read_file(self, env, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("line one\nline two\n", encoding="utf-8")
    assert ReadFileExpr(text(str(path))).eval(env) == StringData("line one\nline two\n")

  def test_read_missing_file(self, env, tmp_path):
    missing = str(tmp_path / "absent.txt")
    with pytest.raises(IOFailureError) as excinfo:
      ReadFileExpr(text(missing)).eval(env)
    assert excinfo.value.path == missing
    assert isinstance(excinfo.value.cause, FileNotFoundError)
    assert excinfo.value.__cause__ is excinfo.value.cause

  def test_read_file_path_must_be_string(self, env):
    with pytest.raises(TypeMismatchError):
      ReadFileExpr(num(3)).eval(env)
