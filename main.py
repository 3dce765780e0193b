"""
TinyLang - Main Entry Point
A parser and interpreter for a tiny assignment/arithmetic language
"""

import sys
import argparse
import atexit
import os
from typing import List, Optional

# Readline support for history
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, create_debug_parser
from interpreter import create_interpreter, create_debug_interpreter
from error_handling import ParseError, EvalError
from utilities import pretty_print_ast, pretty_print_program, format_environment


VERSION = "0.1.0"

GRAMMAR_TEXT = """\
    program     = { statement* }
    statement   = { (assignment | expression) ";" }
    assignment  = { identifier "=" expression }
    expression  = { term (add_op term)* }
    term        = { factor (mul_op factor)* }
    factor      = { number | identifier | "(" expression ")" }
    add_op      = { "+" | "-" }
    mul_op      = { "*" | "/" }
    number      = { ASCII_DIGIT+ }
    identifier  = { ASCII_ALPHA_LOWER+ }"""


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='tinylang',
      description='A parser and interpreter for Tiny Language',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s parse program.tl           # Parse and execute a file
  %(prog)s parse program.tl --quiet   # Execute without printing source and AST
  %(prog)s parse program.tl --debug   # Trace parsing and evaluation
  %(prog)s repl                       # Interactive mode
        """
  )

  parser.add_argument(
      '--version',
      action='version',
      version=f'tinylang {VERSION}'
  )

  subparsers = parser.add_subparsers(dest='command', metavar='<command>')

  parse_cmd = subparsers.add_parser('parse', help='Parse and execute a Tiny Language file')
  parse_cmd.add_argument('file', help='Path to the file to parse')
  parse_cmd.add_argument('--debug', action='store_true', help='Enable debug output for all stages')
  parse_cmd.add_argument('--quiet', action='store_true', help='Do not print the source and AST')

  subparsers.add_parser('parser-help', help='Display help information')
  subparsers.add_parser('credits', help='Display credits and authorship information')

  repl_cmd = subparsers.add_parser('repl', help='Start interactive mode')
  repl_cmd.add_argument('--debug', action='store_true', help='Enable debug output for all stages')

  return parser


def run_file(path: str, debug: bool = False, quiet: bool = False) -> None:
  """Parse and execute a Tiny Language file, then show its variables"""
  try:
    with open(path, 'r', encoding='utf-8') as f:
      content = f.read()
  except FileNotFoundError:
    print(f"Error: Failed to read file {path}: file not found")
    print("  Hint: Check the file path and make sure the file exists")
    sys.exit(1)
  except PermissionError:
    print(f"Error: Failed to read file {path}: permission denied")
    sys.exit(1)
  except UnicodeDecodeError as e:
    print(f"Error: Cannot decode file '{path}': {e}")
    print("  Hint: Make sure the file is a text file with UTF-8 encoding")
    sys.exit(1)
  except OSError as e:
    print(f"Error: Failed to read file {path}: {e}")
    sys.exit(1)

  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  if not quiet:
    print(f"Parsing file: {path}")
    print(f"Source code:\n{content}")

  try:
    ast_nodes = parser.parse_string(content, path)
  except ParseError as e:
    print(f"Parse error: {e}")
    sys.exit(1)

  if not quiet:
    print(f"\nAST ({len(ast_nodes)} statements):")
    print(pretty_print_program(ast_nodes))

  try:
    interpreter.eval(ast_nodes)
  except EvalError as e:
    print(f"Evaluation error: {e}")
    if interpreter.variables:
      print("Variables before the error:")
      print(format_environment(interpreter.variables))
    sys.exit(1)

  print("\nExecution completed.")
  print("Variables:")
  print(format_environment(interpreter.variables))


def print_help() -> None:
  print("Tiny Language Parser")
  print()
  print("USAGE:")
  print("    tinylang <COMMAND>")
  print()
  print("COMMANDS:")
  print("    parse <file>    Parse and execute a Tiny Language file")
  print("    parser-help     Display this help message")
  print("    credits         Display credits and authorship information")
  print("    repl            Start interactive mode")
  print()
  print("Tiny Language Grammar:")
  print(GRAMMAR_TEXT)


def print_credits() -> None:
  print("Tiny Language Parser")
  print("Created as an educational project")
  print()
  print("Features:")
  print("  - Parser for a simple language with variables and arithmetic")
  print("  - AST generation")
  print("  - Interpreter with variable storage")
  print("  - Error handling")
  print("  - Unit test coverage")
  print()
  print("Built with:")
  print("  - Python")
  print("  - pyparsing for the grammar")
  print("  - argparse for the command-line interface")


def setup_readline() -> None:
  """Setup readline with a persistent history file"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.tinylang_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # first session, no history yet

  readline.set_history_length(1000)

  atexit.register(_write_history, history_file)


def _write_history(history_file: str) -> None:
  try:
    readline.write_history_file(history_file)
  except OSError as e:
    print(f"Warning: could not save history: {e}")


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :ast <src>   - Show the AST of a statement or expression")
  print("  :env         - Show current variables")
  print("  :reset       - Forget all variables")
  print("  :help        - Show this help")
  print("  exit         - Exit REPL")
  print()
  print("Statements end with ';', e.g.  x = 2 * (3 + 4);")
  print("A line without ';' is evaluated as a single expression.")


def run_interactive_mode(debug: bool = False) -> None:
  """Run TinyLang in interactive mode, sharing one interpreter for the session"""
  print(f"tinylang {VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input("tiny> ").strip()
    except (KeyboardInterrupt, EOFError):
      print("\nGoodbye!")
      break

    if code == "exit":
      break
    if not code:
      continue

    if code == ":help":
      print_repl_help()
      continue

    if code == ":env":
      print("Current variables:")
      print(format_environment(interpreter.variables))
      continue

    if code == ":reset":
      interpreter.reset()
      print("Variables cleared")
      continue

    try:
      if code.startswith(":ast "):
        source = code[5:].strip()
        if source.endswith(';'):
          print(pretty_print_program(parser.parse_string(source)))
        else:
          print(pretty_print_ast(parser.parse_expression(source)))
        continue

      if code.endswith(';'):
        for node in parser.parse_string(code):
          value = interpreter.eval_node(node)
          print(f"=> {value}")
      else:
        value = interpreter.eval_node(parser.parse_expression(code))
        print(f"=> {value}")
    except ParseError as e:
      print(f"Parse error: {e}")
    except EvalError as e:
      print(f"Evaluation error: {e}")


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for TinyLang"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.command == 'parse':
    run_file(args.file, debug=args.debug, quiet=args.quiet)
  elif args.command == 'parser-help':
    print_help()
  elif args.command == 'credits':
    print_credits()
  elif args.command == 'repl':
    run_interactive_mode(debug=args.debug)
  else:
    arg_parser.print_help()


if __name__ == "__main__":
  main()
