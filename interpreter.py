"""
Kestrel Interpreter
Wires parser and evaluator together: one root environment per program run
"""

import sys
from typing import Optional, TextIO

from data import Data
from expr import Block
from parsing import create_parser
from runtime import Environment


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def create_root_env(output: Optional[TextIO] = None, debug: bool = False) -> Environment:
  """Fresh global scope; `print` writes to `output` (stdout when omitted)"""
  return Environment(output=output, debug=debug)


def eval_program(program: Block, env: Optional[Environment] = None, debug: bool = False) -> Data:
  """
  Evaluate a top-level Block and return the value of its last statement.

  Runtime failures propagate as KestrelRuntimeError subclasses; reporting
  them is left to the caller.
  """
  if env is None:
    env = create_root_env(debug=debug)

  if env.debug:
    print(f"[run] {len(program.statements)} top-level statements", file=sys.stderr)

  return program.eval(env)


# ============================================================================
# INTERPRETER SESSION
# ============================================================================

class KestrelInterpreter:
  """
  Parser plus a persistent global scope.

  Successive `run_source` calls share `global_env`, which is what the
  interactive mode relies on.
  """

  def __init__(self, debug: bool = False, output: Optional[TextIO] = None):
    self.debug = debug
    self.parser = create_parser(debug)
    self.output = output
    self.global_env = create_root_env(output, debug)

  def run_source(self, text: str, filename: str = "<input>") -> Data:
    program = self.parser.parse_string(text, filename)
    return eval_program(program, self.global_env)

  def run_file(self, filepath: str) -> Data:
    program = self.parser.parse_file(filepath)
    return eval_program(program, self.global_env)

  def eval_expression(self, text: str) -> Data:
    return self.parser.parse_expression(text).eval(self.global_env)

  def user_bindings(self):
    """Global names and their values, in definition order"""
    return dict(self.global_env.bindings)

  def reset(self) -> None:
    self.global_env = create_root_env(self.output, self.debug)


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, output: Optional[TextIO] = None) -> KestrelInterpreter:
  """Factory function returning an interpreter"""
  return KestrelInterpreter(debug=debug, output=output)


def create_debug_interpreter(output: Optional[TextIO] = None) -> KestrelInterpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True, output=output)
