"""
Utilities module for the Kestrel interpreter
Operand checking and operator factories shared by the builtins
"""

from typing import Callable

from data import Data, IntData, BoolData, StringData, type_name_of
from error_handling import TypeMismatchError


# ==================== ERROR CONSTRUCTION ====================

def describe_operands(*values: Data) -> str:
  """
  Comma-separated variant names of the operands

  Examples:
    describe_operands(IntData(1), StringData("a")) -> "Int, Str"
  """
  return ", ".join(type_name_of(v) for v in values)


def type_mismatch_error(operation: str, *values: Data) -> TypeMismatchError:
  """Build a TypeMismatchError naming the operation and the operand kinds"""
  return TypeMismatchError(operation, describe_operands(*values))


# ==================== OPERAND CHECKING ====================

def expect_int(operation: str, value: Data) -> int:
  """Unwrap an Int operand or raise TypeMismatchError"""
  if not isinstance(value, IntData):
    raise type_mismatch_error(operation, value)
  return value.value


def expect_bool(operation: str, value: Data) -> bool:
  if not isinstance(value, BoolData):
    raise type_mismatch_error(operation, value)
  return value.value


def expect_string(operation: str, value: Data) -> str:
  if not isinstance(value, StringData):
    raise type_mismatch_error(operation, value)
  return value.value


# ==================== ARITHMETIC HELPERS ====================

def truncating_div(a: int, b: int) -> int:
  """Integer division rounding toward zero (Python's // rounds toward -inf)"""
  quotient = abs(a) // abs(b)
  return quotient if (a < 0) == (b < 0) else -quotient


def binary_comparison_op(
  op: Callable[[int, int], bool],
  op_name: str
) -> Callable[[Data, Data], Data]:
  """
  Factory for Int comparisons returning Bool

  Examples:
    kestrel_gt = binary_comparison_op(operator.gt, ">")
    kestrel_gt(IntData(2), IntData(1)) -> BoolData(True)
  """
  def comparison(x: Data, y: Data) -> Data:
    if not (isinstance(x, IntData) and isinstance(y, IntData)):
      raise type_mismatch_error(op_name, x, y)
    return BoolData(op(x.value, y.value))

  comparison.__name__ = f"compare_{op.__name__}"
  return comparison


def binary_logical_op(
  op: Callable[[bool, bool], bool],
  op_name: str
) -> Callable[[Data, Data], Data]:
  """Factory for Bool x Bool -> Bool operators; both operands already evaluated"""
  def logical(x: Data, y: Data) -> Data:
    if not (isinstance(x, BoolData) and isinstance(y, BoolData)):
      raise type_mismatch_error(op_name, x, y)
    return BoolData(op(x.value, y.value))

  return logical
