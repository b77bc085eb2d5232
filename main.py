"""
RPAL Interpreter - Main Entry Point
Runs RPAL programs through the parser, the standardizer and the CSE machine
"""

import sys
import argparse
from pathlib import Path
import os

# Optional line editing for the REPL
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from parsing import create_parser, create_debug_parser, pretty_print_ast, RESERVED_WORDS
from error_handling import RPALParseError
from semantics import RPALStandardizeError
from interpreter import create_interpreter, create_debug_interpreter
from utilities import RPALRuntimeError
from stdlib import list_builtin_functions
from values import value_to_string


VERSION = 'RPAL v0.1.0 (CSE Machine)'


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='RPAL interpreter - standardizer and CSE machine',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.rpal            # Run a program, print its output
  %(prog)s -ast program.rpal       # Print the abstract syntax tree, then run
  %(prog)s -st program.rpal        # Print the standardized tree, then run
  %(prog)s -ast -noout prog.rpal   # Print the tree only
  %(prog)s -i                      # Interactive mode
  %(prog)s --debug program.rpal    # Trace every phase
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='RPAL program file to execute'
  )

  parser.add_argument(
      '-ast', '--ast',
      action='store_true',
      help='Print the abstract syntax tree before running'
  )

  parser.add_argument(
      '-st', '--st',
      action='store_true',
      help='Print the standardized tree before running'
  )

  parser.add_argument(
      '-noout', '--noout',
      action='store_true',
      help='Do not print the program output'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
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


def run_script_file(script_path: str, show_ast: bool = False, show_st: bool = False,
                    no_output: bool = False, debug: bool = False) -> None:
  """Run an RPAL program file, optionally printing its trees"""
  try:
    parser = create_debug_parser() if debug else create_parser()
    interpreter = create_debug_interpreter() if debug else create_interpreter()

    tree = parser.parse_file(script_path)
    if show_ast:
      print(pretty_print_ast(tree), end='')

    if show_st:
      interpreter.standardize(tree)
      print(pretty_print_ast(tree), end='')

    # Standardizing an already standardized tree leaves it unchanged
    result, output = interpreter.run_tree(tree)

    if debug:
      print(f"Result: {value_to_string(result)}")

    if not no_output:
      print(output)

  except PermissionError:
    print(f"Error: cannot read '{script_path}' (permission denied)")
    sys.exit(1)
  except RPALParseError as e:
    print(f"Parse error in '{script_path}': {e}")
    sys.exit(1)
  except RPALStandardizeError as e:
    print(f"Standardization error in '{script_path}': {e.message}")
    sys.exit(1)
  except RPALRuntimeError as e:
    print(f"\n{'='*70}")
    print(f"Runtime Error in '{script_path}'")
    print(f"{'='*70}")
    print(f"\nError: {e.message}")
    print(f"\n{'='*70}\n")
    sys.exit(1)
  except RecursionError:
    print(f"Error: '{script_path}' is nested too deeply to evaluate")
    sys.exit(1)


def setup_readline():
  """Load REPL history and install tab completion of RPAL words"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser("~/.rpal_history")
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # no history yet

  readline.set_history_length(1000)

  # Reserved words, built-ins and REPL commands
  completions = RESERVED_WORDS + list_builtin_functions() + [":ast", ":st", ":help", ":quit"]

  def completer(prefix, index):
    matches = [word for word in completions if word.startswith(prefix)]
    return matches[index] if index < len(matches) else None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(lambda: readline.write_history_file(history_file))


def print_repl_help() -> None:
  print("REPL Commands:")
  print("  :ast <expr>       - Show the abstract syntax tree")
  print("  :st <expr>        - Show the standardized tree")
  print("  :help             - Show this help")
  print("  :quit             - Exit REPL")
  print()
  print("Each line is a complete RPAL program, for example:")
  print("  let x = 5 in x + 1")
  print("  let rec f n = n eq 0 -> 1 | n * f (n - 1) in f 5")
  print("  Print (1, 'two', true)")


def run_interactive_mode(debug: bool = False) -> None:
  """Run RPAL in interactive mode; each line is evaluated as a whole program"""
  print(f"{VERSION} - Interactive Mode")
  print("Type ':quit' to exit, ':help' for commands")
  if READLINE_AVAILABLE:
    print("History and Tab completion are available")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  interpreter = create_debug_interpreter() if debug else create_interpreter()

  while True:
    try:
      code = input("rpal> ")

      if code.strip() in (":quit", ":q"):
        break

      if not code.strip():
        continue

      if code.strip() == ":help":
        print_repl_help()
        continue

      try:
        if code.startswith(":ast "):
          print(pretty_print_ast(parser.parse_string(code[5:])), end='')
          continue

        if code.startswith(":st "):
          tree = interpreter.standardize(parser.parse_string(code[4:]))
          print(pretty_print_ast(tree), end='')
          continue

        result, output = interpreter.run_tree(parser.parse_string(code))
        if output:
          print(output)
        print(f"=> {value_to_string(result)}")
      except RPALParseError as e:
        print(e)
      except RPALStandardizeError as e:
        print(f"Standardization error: {e.message}")
      except RPALRuntimeError as e:
        print("\nRuntime Error:")
        print(f"  {e.message}")
        print()
      except RecursionError:
        print("Error: expression nested too deeply to evaluate")

    except KeyboardInterrupt:
      print("\nGoodbye!")
      break
    except EOFError:
      print("\nGoodbye!")
      break


def show_language_info() -> None:
  """Show RPAL language information"""
  print("RPAL - Right-reference Pedagogic Algorithmic Language")
  print("=" * 50)
  print("An applicative functional language with:")
  print("• let / where / within / rec definitions")
  print("• Curried functions and tuples")
  print("• Evaluation on a CSE (control, stack, environment) machine")
  print()


def main() -> None:
  """Main entry point for RPAL"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if len(sys.argv) == 1:
    # No arguments - show info and start interactive mode
    show_language_info()
    print("Starting interactive mode...")
    print("Use 'rpal --help' for command line options")
    print()
    run_interactive_mode(debug=False)
    return

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Script file '{args.script}' does not exist")
      sys.exit(1)

    run_script_file(args.script, show_ast=args.ast, show_st=args.st,
                    no_output=args.noout, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()
