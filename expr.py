"""
Kestrel AST nodes
Each node evaluates against an Environment and yields exactly one Data value
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List
import sys

from data import Data, IntData, StringData, BoolData, FunctionData, NONE, type_name_of
from error_handling import NotAFunctionError, TypeMismatchError
from runtime import Environment
from stdlib import (
  BUILTIN_OPERATORS,
  kestrel_negate,
  kestrel_not,
  kestrel_print,
  kestrel_read_file,
  kestrel_split,
)


def trace(env: Environment, message: str) -> None:
  """Debug trace line, indented by scope depth"""
  if env.debug:
    print(f"{'  ' * env.depth()}[eval] {message}", file=sys.stderr)


class Expr(ABC):
  """Base of every evaluable node"""

  @abstractmethod
  def eval(self, env: Environment) -> Data:
    ...

  def __repr__(self) -> str:
    fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items())
    return f"{type(self).__name__}({fields})"


# ============================================================================
# LITERALS AND VARIABLES
# ============================================================================

class IntLiteral(Expr):
  def __init__(self, value: int):
    self.value = IntData(int(value))

  def eval(self, env: Environment) -> Data:
    return self.value


class StringLiteral(Expr):
  def __init__(self, value: str):
    self.value = StringData(value)

  def eval(self, env: Environment) -> Data:
    return self.value

  def get_value(self) -> str:
    return self.value.value


class BoolLiteral(Expr):
  def __init__(self, value: bool):
    self.value = BoolData(bool(value))

  def eval(self, env: Environment) -> Data:
    return self.value


class NoneLiteral(Expr):
  def eval(self, env: Environment) -> Data:
    return NONE


class Deref(Expr):
  def __init__(self, name: str):
    self.name = name

  def eval(self, env: Environment) -> Data:
    return env.lookup(self.name)


class Assign(Expr):
  def __init__(self, name: str, expr: Expr):
    self.name = name
    self.expr = expr

  def eval(self, env: Environment) -> Data:
    result = self.expr.eval(env)
    env.define_or_assign(self.name, result)
    trace(env, f"{self.name} = {result}")
    return result


# ============================================================================
# OPERATORS
# ============================================================================

class Operator(Enum):
  Add = '+'
  Sub = '-'
  Mul = '*'
  Div = '/'


class Comparator(Enum):
  GT = '>'
  LT = '<'
  EQ = '=='
  GE = '>='


class Arithmetics(Expr):
  def __init__(self, operator: Operator, e1: Expr, e2: Expr):
    self.operator = operator
    self.e1 = e1
    self.e2 = e2

  def eval(self, env: Environment) -> Data:
    left = self.e1.eval(env)
    right = self.e2.eval(env)
    return BUILTIN_OPERATORS[self.operator.value](left, right)


class AddString(Expr):
  """`a ++ b`: concatenates text forms, never a type failure"""

  def __init__(self, e1: Expr, e2: Expr):
    self.e1 = e1
    self.e2 = e2

  def eval(self, env: Environment) -> Data:
    left = self.e1.eval(env)
    right = self.e2.eval(env)
    return BUILTIN_OPERATORS['++'](left, right)


class Compare(Expr):
  def __init__(self, comparator: Comparator, e1: Expr, e2: Expr):
    self.comparator = comparator
    self.e1 = e1
    self.e2 = e2

  def eval(self, env: Environment) -> Data:
    left = self.e1.eval(env)
    right = self.e2.eval(env)
    return BUILTIN_OPERATORS[self.comparator.value](left, right)


class NegationExpr(Expr):
  def __init__(self, expr: Expr):
    self.expr = expr

  def eval(self, env: Environment) -> Data:
    return kestrel_negate(self.expr.eval(env))


class LogicalAndExpr(Expr):
  """Both operands are always evaluated; there is no short-circuit"""

  def __init__(self, left: Expr, right: Expr):
    self.left = left
    self.right = right

  def eval(self, env: Environment) -> Data:
    left = self.left.eval(env)
    right = self.right.eval(env)
    return BUILTIN_OPERATORS['&&'](left, right)


class LogicalOrExpr(Expr):
  """Both operands are always evaluated; there is no short-circuit"""

  def __init__(self, left: Expr, right: Expr):
    self.left = left
    self.right = right

  def eval(self, env: Environment) -> Data:
    left = self.left.eval(env)
    right = self.right.eval(env)
    return BUILTIN_OPERATORS['||'](left, right)


class LogicalNotExpr(Expr):
  def __init__(self, expr: Expr):
    self.expr = expr

  def eval(self, env: Environment) -> Data:
    return kestrel_not(self.expr.eval(env))


# ============================================================================
# CONTROL FLOW
# ============================================================================

def eval_condition(construct: str, condition: Expr, env: Environment) -> bool:
  result = condition.eval(env)
  if not isinstance(result, BoolData):
    raise TypeMismatchError(f"{construct} condition", type_name_of(result))
  return result.value


class TernaryExpr(Expr):
  def __init__(self, condition: Expr, true_expr: Expr, false_expr: Expr):
    self.condition = condition
    self.true_expr = true_expr
    self.false_expr = false_expr

  def eval(self, env: Environment) -> Data:
    if eval_condition("ternary", self.condition, env):
      return self.true_expr.eval(env)
    return self.false_expr.eval(env)


class Ifelse(Expr):
  def __init__(self, condition: Expr, then_branch: Expr, else_branch: Expr):
    self.condition = condition
    self.then_branch = then_branch
    self.else_branch = else_branch

  def eval(self, env: Environment) -> Data:
    if eval_condition("if", self.condition, env):
      return self.then_branch.eval(env)
    return self.else_branch.eval(env)


class ForLoop(Expr):
  """
  Inclusive integer range loop.

  The body runs in the enclosing scope and the loop variable is assigned
  there, so it stays visible after the loop. Non-Int bounds make the loop a
  no-op returning None.
  """

  def __init__(self, iterator: str, start: Expr, end: Expr, body: Expr):
    self.iterator = iterator
    self.start = start
    self.end = end
    self.body = body

  def eval(self, env: Environment) -> Data:
    start = self.start.eval(env)
    if not isinstance(start, IntData):
      return NONE
    end = self.end.eval(env)
    if not isinstance(end, IntData):
      return NONE

    trace(env, f"for {self.iterator} in {start.value}..{end.value}")
    last = NONE
    for i in range(start.value, end.value + 1):
      env.define_or_assign(self.iterator, IntData(i))
      last = self.body.eval(env)
    return last


class Block(Expr):
  def __init__(self, statements: List[Expr]):
    self.statements = list(statements)

  def eval(self, env: Environment) -> Data:
    result = NONE
    for statement in self.statements:
      trace(env, type(statement).__name__)
      result = statement.eval(env)
    return result


# ============================================================================
# FUNCTIONS
# ============================================================================

class Declare(Expr):
  def __init__(self, name: str, params: List[str], body: Expr):
    self.name = name
    self.params = list(params)
    self.body = body

  def eval(self, env: Environment) -> Data:
    env.define(self.name, FunctionData(self.params, self.body, env, self.name))
    return NONE


class Invoke(Expr):
  def __init__(self, function_name: str, args: List[Expr]):
    self.function_name = function_name
    self.args = list(args)

  def eval(self, env: Environment) -> Data:
    function = env.lookup(self.function_name)
    if not isinstance(function, FunctionData):
      raise NotAFunctionError(self.function_name, type_name_of(function))

    args = [arg.eval(env) for arg in self.args]
    trace(env, f"call {self.function_name}({', '.join(str(a) for a in args)})")
    return function.invoke(args)


# ============================================================================
# BUILTINS
# ============================================================================

class PrintExpr(Expr):
  def __init__(self, expr: Expr):
    self.expr = expr

  def eval(self, env: Environment) -> Data:
    return kestrel_print(self.expr.eval(env), env.output)


class ReadFileExpr(Expr):
  def __init__(self, file_path_expr: Expr):
    self.file_path_expr = file_path_expr

  def eval(self, env: Environment) -> Data:
    return kestrel_read_file(self.file_path_expr.eval(env))


class SplitStringExpr(Expr):
  def __init__(self, string_to_split: Expr, delimiter: Expr):
    self.string_to_split = string_to_split
    self.delimiter = delimiter

  def eval(self, env: Environment) -> Data:
    text = self.string_to_split.eval(env)
    delimiter = self.delimiter.eval(env)
    return kestrel_split(text, delimiter)
