"""
String interpolation for Kestrel

`"Total: ${a + b}"` placeholders are parsed by a deliberately small expression
reader, separate from the main grammar: integers, variable names and the four
arithmetic operators, with no precedence and no parentheses. The rightmost
operator splits first, so `2 + 3 * 4` reads as `(2 + 3) * 4`.
"""

import re

from data import Data, StringData
from error_handling import KestrelRuntimeError, UndefinedVariableError
from expr import Expr, Arithmetics, Deref, IntLiteral, Operator, trace
from runtime import Environment


PLACEHOLDER_PATTERN = re.compile(r'\$\{([^}]+)\}')
INTEGER_PATTERN = re.compile(r'[0-9]+')
WHITESPACE_PATTERN = re.compile(r'\s+')

OPERATORS = {
    '+': Operator.Add,
    '-': Operator.Sub,
    '*': Operator.Mul,
    '/': Operator.Div,
}


def parse_expression(expression: str, env: Environment) -> Expr:
  """
  Build an AST for the inside of one placeholder.

  Names are resolved against `env` while parsing: an operand that is neither
  an integer nor a bound name raises UndefinedVariableError.
  """
  text = WHITESPACE_PATTERN.sub('', expression)

  for i in range(len(text) - 1, -1, -1):
    if text[i] in OPERATORS:
      left = parse_expression(text[:i], env)
      right = parse_expression(text[i + 1:], env)
      return Arithmetics(OPERATORS[text[i]], left, right)

  if INTEGER_PATTERN.fullmatch(text):
    return IntLiteral(int(text))

  if text in env:
    return Deref(text)

  raise UndefinedVariableError(text)


class InterpolatedStringExpr(Expr):
  """
  String literal with `${...}` placeholders.

  A placeholder that fails to evaluate is replaced by `Error: <message>`;
  the failure does not propagate.
  """

  def __init__(self, interpolated_text: str):
    self.interpolated_text = interpolated_text

  def eval(self, env: Environment) -> Data:
    def substitute(match: re.Match) -> str:
      try:
        return str(parse_expression(match.group(1), env).eval(env))
      except KestrelRuntimeError as e:
        trace(env, f"interpolation of '{match.group(1)}' failed: {e}")
        return f"Error: {e}"

    return StringData(PLACEHOLDER_PATTERN.sub(substitute, self.interpolated_text))
