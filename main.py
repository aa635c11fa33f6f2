"""
Kestrel Programming Language - Main Entry Point
A small imperative scripting language with closures and string interpolation
"""

import sys
import argparse
from pathlib import Path
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from data import NoneData
from error_handling import KestrelParseError, KestrelRuntimeError
from interpreter import create_interpreter, create_debug_interpreter
from parsing import create_parser, create_debug_parser, pretty_print_ast

VERSION = "Kestrel v0.3.0"
HISTORY_FILE = "~/.kestrel_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='kestrel',
      description='Kestrel Programming Language - tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.ks              # Run a Kestrel script
  %(prog)s -i                     # Interactive mode
  %(prog)s --parse script.ks      # Parse and show the AST
  %(prog)s --debug script.ks      # Run with evaluation trace on stderr
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Kestrel script file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def parse_file(script_path: str, debug: bool = False) -> int:
  """Parse a Kestrel script file and show the AST"""
  parser = create_debug_parser() if debug else create_parser()
  try:
    program = parser.parse_file(script_path)
  except KestrelParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    return 1

  print(f"Parsed {len(program.statements)} top-level statements:")
  print("=" * 50)
  print(pretty_print_ast(program), end='')
  return 0


def report_runtime_error(e: KestrelRuntimeError, script_path: str, debug: bool = False) -> None:
  print(f"\n{'='*70}", file=sys.stderr)
  print(f"Runtime Error in '{script_path}'", file=sys.stderr)
  print(f"{'='*70}", file=sys.stderr)
  print(f"\n{type(e).__name__}: {e.message}", file=sys.stderr)
  if debug and e.__cause__ is not None:
    print(f"\nCaused by: {e.__cause__!r}", file=sys.stderr)
  print(f"\n{'='*70}\n", file=sys.stderr)


def run_script_file(script_path: str, debug: bool = False) -> int:
  """Run a Kestrel script file; returns the process exit status"""
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  try:
    interpreter.run_file(script_path)
  except KestrelParseError as e:
    print(f"Parse error in '{script_path}': {e}", file=sys.stderr)
    return 1
  except KestrelRuntimeError as e:
    report_runtime_error(e, script_path, debug)
    return 1
  except RecursionError:
    print(f"Runtime Error in '{script_path}': maximum recursion depth exceeded", file=sys.stderr)
    return 1

  if debug:
    bindings = interpreter.user_bindings()
    print(f"\nFinal environment ({len(bindings)} bindings):", file=sys.stderr)
    for name, value in bindings.items():
      print(f"  {name} = {value}", file=sys.stderr)
  return 0


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First run, no history yet

  readline.set_history_length(1000)

  completions = [
      # Keywords
      "let", "function", "for", "in", "if", "else", "true", "false", "None",
      # Builtins
      "print", "readFile", "split",
      # REPL commands
      ":parse", ":env", ":reset", ":help", "exit"
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def print_help() -> None:
  print("REPL Commands:")
  print("  :parse <expr>     - Show parsed AST")
  print("  :env              - Show current environment")
  print("  :reset            - Clear all bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print('  let x = 5;                     - Variable binding')
  print('  function add(a, b) { a + b }   - Function definition')
  print('  add(1, 2)                      - Function call')
  print('  for (i in 1..3) { print(i); }  - Inclusive range loop')
  print('  "${x} items"                   - String interpolation')


def run_interactive_mode(debug: bool = False) -> None:
  """Run Kestrel in interactive mode; bindings persist between lines"""
  print(f"{VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input("kestrel> ")
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if code.strip() == "exit":
      break

    if not code.strip():
      continue

    if code.startswith(":parse "):
      try:
        print(pretty_print_ast(interpreter.parser.parse_expression(code[7:])), end='')
      except KestrelParseError as e:
        print(f"Parse error: {e}")
      continue

    if code.strip() == ":env":
      bindings = interpreter.user_bindings()
      if not bindings:
        print("  (no user-defined bindings)")
      for name, value in bindings.items():
        val_str = str(value)
        if len(val_str) > 60:
          val_str = val_str[:57] + "..."
        print(f"  {name} = {val_str}")
      continue

    if code.strip() == ":reset":
      interpreter.reset()
      continue

    if code.strip() == ":help":
      print_help()
      continue

    try:
      result = interpreter.run_source(code, "<stdin>")
      if not isinstance(result, NoneData):
        print(f"=> {result}")
    except KestrelParseError as e:
      print(f"Parse error: {e}")
    except KestrelRuntimeError as e:
      print(f"\nRuntime Error:\n  {e.message}\n")
    except RecursionError:
      print("\nRuntime Error:\n  maximum recursion depth exceeded\n")


def show_language_info() -> None:
  """Show Kestrel language information"""
  print("Kestrel Programming Language")
  print("=" * 50)
  print("A small imperative scripting language with:")
  print("• Integers, strings, booleans and lists")
  print("• Functions with lexical closures")
  print("• Inclusive range loops and conditionals")
  print("• String interpolation with ${...}")
  print()


def main(argv=None) -> int:
  """Main entry point for Kestrel"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist", file=sys.stderr)
      return 1

    if args.parse:
      return parse_file(args.script, debug=args.debug)
    return run_script_file(args.script, debug=args.debug)

  if args.interactive:
    run_interactive_mode(debug=args.debug)
    return 0

  # No script given - show info and start interactive mode
  show_language_info()
  run_interactive_mode(debug=args.debug)
  return 0


if __name__ == "__main__":
  sys.exit(main())
