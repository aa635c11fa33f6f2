"""
Kestrel Standard Library
Operator implementations and the host-facing builtins (print, readFile, split)
"""

from typing import List, TextIO
import operator

from data import Data, BoolData, IntData, StringData, ListData, NONE
from error_handling import DivisionByZeroError, IOFailureError
from utilities import (
  binary_comparison_op,
  binary_logical_op,
  expect_bool,
  expect_int,
  expect_string,
  truncating_div,
  type_mismatch_error,
)


# ============================================================================
# ARITHMETIC
# ============================================================================

def kestrel_add(x: Data, y: Data) -> Data:
  """Int + Int, or string concatenation when either side is a Str"""
  if isinstance(x, IntData) and isinstance(y, IntData):
    return IntData(x.value + y.value)
  if isinstance(x, StringData) or isinstance(y, StringData):
    return StringData(str(x) + str(y))
  raise type_mismatch_error("+", x, y)


def kestrel_sub(x: Data, y: Data) -> Data:
  if not (isinstance(x, IntData) and isinstance(y, IntData)):
    raise type_mismatch_error("-", x, y)
  return IntData(x.value - y.value)


def kestrel_mul(x: Data, y: Data) -> Data:
  """Int * Int, or Str repeated by an Int count on either side"""
  if isinstance(x, IntData) and isinstance(y, IntData):
    return IntData(x.value * y.value)
  # A negative count repeats zero times
  if isinstance(x, StringData) and isinstance(y, IntData):
    return StringData(x.value * y.value)
  if isinstance(x, IntData) and isinstance(y, StringData):
    return StringData(y.value * x.value)
  raise type_mismatch_error("*", x, y)


def kestrel_div(x: Data, y: Data) -> Data:
  if not (isinstance(x, IntData) and isinstance(y, IntData)):
    raise type_mismatch_error("/", x, y)
  if y.value == 0:
    raise DivisionByZeroError()
  return IntData(truncating_div(x.value, y.value))


def kestrel_negate(x: Data) -> Data:
  return IntData(-expect_int("unary -", x))


def kestrel_concat(x: Data, y: Data) -> Data:
  """The ++ operator: text forms joined, defined for every pair of values"""
  return StringData(str(x) + str(y))


# ============================================================================
# COMPARISON AND LOGIC
# ============================================================================

kestrel_gt = binary_comparison_op(operator.gt, ">")
kestrel_lt = binary_comparison_op(operator.lt, "<")
kestrel_eq = binary_comparison_op(operator.eq, "==")
kestrel_ge = binary_comparison_op(operator.ge, ">=")

kestrel_and = binary_logical_op(lambda a, b: a and b, "&&")
kestrel_or = binary_logical_op(lambda a, b: a or b, "||")


def kestrel_not(x: Data) -> Data:
  return BoolData(not expect_bool("!", x))


# ============================================================================
# I/O AND STRINGS
# ============================================================================

def kestrel_print(value: Data, out: TextIO) -> Data:
  """Write the value's text form and a newline to `out`"""
  out.write(f"{value}\n")
  return NONE


def kestrel_read_file(path: Data) -> Data:
  """Read a whole file as UTF-8 text"""
  filename = expect_string("readFile", path)
  try:
    with open(filename, 'r', encoding='utf-8') as f:
      return StringData(f.read())
  except (OSError, UnicodeDecodeError) as e:
    raise IOFailureError(filename, e) from e


def split_text(text: str, delimiter: str) -> List[str]:
  """
  Literal substring split

  An empty delimiter splits between every character, keeping an empty piece
  at both ends: split_text("ab", "") -> ["", "a", "b", ""]
  """
  if delimiter == "":
    return [""] + list(text) + [""]
  return text.split(delimiter)


def kestrel_split(text: Data, delimiter: Data) -> Data:
  if not (isinstance(text, StringData) and isinstance(delimiter, StringData)):
    raise type_mismatch_error("split", text, delimiter)
  return ListData([StringData(piece) for piece in split_text(text.value, delimiter.value)])


# Binary operator table keyed by source symbol
BUILTIN_OPERATORS = {
    '+': kestrel_add,
    '-': kestrel_sub,
    '*': kestrel_mul,
    '/': kestrel_div,
    '++': kestrel_concat,
    '>': kestrel_gt,
    '<': kestrel_lt,
    '==': kestrel_eq,
    '>=': kestrel_ge,
    '&&': kestrel_and,
    '||': kestrel_or,
}
