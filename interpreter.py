"""
RPAL Interpreter - CSE machine
Executes control structures with a control stack, a value stack and the
current environment. Output written by Print is collected on a text stream.
"""

from typing import Dict, List, Optional, TextIO, Tuple
import io

from parsing import ASTNode, create_parser, node_label
from semantics import standardize
from control import build_control_structures
from environment import Environment
from values import Delta, Eta, EnvMarker, TupleValue, copy_node, value_to_string
from utilities import (
  RPALRuntimeError,
  type_mismatch_error,
  application_error,
  arity_error,
  integer_value
)
from stdlib import UNARY_OPERATORS, BINARY_OPERATORS, BUILTIN_FUNCTIONS


# Instructions pushed onto the value stack unchanged
LITERAL_TYPES = {"INTEGER", "STRING", "TRUE", "FALSE", "DUMMY", "YSTAR"}


# ============================================================================
# MACHINE STATE
# ============================================================================

def make_machine_state(root_delta: Delta, output: Optional[TextIO] = None) -> Dict:
  """Initial machine state: the root body on the control stack, an empty environment"""
  return {
      'control': [copy_node(item) for item in root_delta.body],
      'values': [],
      'env': Environment(),
      'output': output if output is not None else io.StringIO(),
      'steps': 0
  }


# ============================================================================
# APPLICATION
# ============================================================================

def apply_closure(state: Dict, delta: Delta, rand: ASTNode, debug: bool = False) -> None:
  """Enter a closure body in a new environment, restoring the caller's on return"""
  env = Environment(parent=delta.env)
  names = delta.bound_vars

  if len(names) == 1:
    env.bind(names[0], rand)
  elif len(names) > 1:
    if rand.type != "TUPLE":
      raise type_mismatch_error(value_to_string(delta), "argument", f"tuple of {len(names)}", rand)
    if len(rand.children) != len(names):
      raise arity_error(value_to_string(delta), len(names), len(rand.children))
    for name, value in zip(names, rand.children):
      env.bind(name, value)

  if debug:
    print(f"Entering control structure {delta.index} at depth {env.depth()}")

  state['control'].append(EnvMarker(env=state['env']))
  state['env'] = env
  state['control'].extend(delta.body)


def apply_builtin(state: Dict, rator: ASTNode, rand: ASTNode, debug: bool = False) -> ASTNode:
  """Apply a named built-in; missing arguments yield a partial application"""
  builtin = BUILTIN_FUNCTIONS[rator.value]
  args = rator.children + [rand]

  if len(args) < builtin['arity']:
    return ASTNode("IDENTIFIER", rator.value, args)

  if debug:
    print(f"Calling built-in {builtin['name']}")

  if builtin['needs_output']:
    return builtin['func'](*args, output=state['output'])
  return builtin['func'](*args)


def apply_gamma(state: Dict, debug: bool = False) -> None:
  """Apply the function on top of the value stack to the argument beneath it"""
  values = state['values']
  rator = values.pop()
  rand = values.pop()
  rator_type = rator.type

  if rator_type == "DELTA":
    apply_closure(state, rator, rand, debug)

  elif rator_type == "YSTAR":
    if rand.type != "DELTA":
      raise type_mismatch_error("Y*", "argument", "function", rand)
    values.append(Eta(delta=rand))

  elif rator_type == "ETA":
    # Unwrap one level: apply the closure to the wrapper, then the result to the argument
    values.append(rand)
    values.append(rator)
    values.append(copy_node(rator.delta))
    state['control'].append(ASTNode("GAMMA"))
    state['control'].append(ASTNode("GAMMA"))

  elif rator_type == "TUPLE":
    if rand.type != "INTEGER":
      raise type_mismatch_error("Tuple selection", "index", "integer", rand)
    position = integer_value(rand)
    if position < 1 or position > len(rator.children):
      raise RPALRuntimeError(
        f"Tuple index {position} out of range for {value_to_string(rator)}")
    values.append(rator.children[position - 1])

  elif rator_type == "IDENTIFIER" and rator.value in BUILTIN_FUNCTIONS:
    values.append(apply_builtin(state, rator, rand, debug))

  else:
    raise application_error(rator)


# ============================================================================
# EXECUTION
# ============================================================================

def exec_identifier(state: Dict, node: ASTNode) -> None:
  name = node.value
  if state['env'].is_bound(name):
    state['values'].append(state['env'].lookup(name))
  elif name in BUILTIN_FUNCTIONS:
    state['values'].append(node)
  else:
    # Raises the undeclared identifier error
    state['env'].lookup(name)


def exec_tau(state: Dict, node: ASTNode) -> None:
  """Collect `arity` values; the first popped is the first component"""
  values = state['values']
  if len(values) < node.arity:
    raise RPALRuntimeError(f"tau needs {node.arity} values, stack holds {len(values)}")
  components = [values.pop() for _ in range(node.arity)]
  values.append(TupleValue(children=components))


def exec_beta(state: Dict, node: ASTNode) -> None:
  condition = state['values'].pop()
  if condition.type == "TRUE":
    state['control'].extend(node.then_body)
  elif condition.type == "FALSE":
    state['control'].extend(node.else_body)
  else:
    raise type_mismatch_error("->", "condition", "truthvalue", condition)


def step(state: Dict, debug: bool = False) -> None:
  """Pop one control item and execute it"""
  node = state['control'].pop()
  node_type = node.type
  values = state['values']
  state['steps'] += 1

  if debug:
    print(f"Step {state['steps']}: {node_label(node)} "
          f"(control={len(state['control'])}, values={len(values)}, env depth={state['env'].depth()})")

  if node_type == "IDENTIFIER":
    exec_identifier(state, node)
  elif node_type in LITERAL_TYPES:
    values.append(node)
  elif node_type == "NIL":
    values.append(TupleValue())
  elif node_type == "TAU":
    exec_tau(state, node)
  elif node_type == "DELTA":
    node.env = state['env']
    values.append(node)
  elif node_type == "BETA":
    exec_beta(state, node)
  elif node_type == "ENV":
    state['env'] = node.env
  elif node_type == "GAMMA":
    apply_gamma(state, debug)
  elif node_type in UNARY_OPERATORS:
    operand = values.pop()
    values.append(UNARY_OPERATORS[node_type](operand))
  elif node_type in BINARY_OPERATORS:
    # The left operand is linearized last, so it is on top
    left = values.pop()
    right = values.pop()
    values.append(BINARY_OPERATORS[node_type](left, right))
  else:
    raise RPALRuntimeError(f"Cannot execute {node_label(node)}")


# ============================================================================
# PROGRAM EVALUATION
# ============================================================================

def eval_program(deltas: List[Delta], root_index: int, output: Optional[TextIO] = None,
                 debug: bool = False) -> Tuple[ASTNode, str]:
  """
  Run the machine until the control stack is empty.
  Returns (result value, text written by Print).
  """
  state = make_machine_state(deltas[root_index], output)

  while state['control']:
    step(state, debug)

  if len(state['values']) != 1:
    raise RPALRuntimeError(
      f"Machine halted with {len(state['values'])} values on the stack, expected 1")

  if debug:
    print(f"Finished after {state['steps']} steps")

  getvalue = getattr(state['output'], 'getvalue', None)
  return state['values'][0], getvalue() if getvalue is not None else ""


def evaluate_tree(tree: ASTNode, output: Optional[TextIO] = None,
                  debug: bool = False) -> Tuple[ASTNode, str]:
  """Standardize a raw tree and run it"""
  standardize(tree, debug)
  deltas, root_index = build_control_structures(tree, debug)
  return eval_program(deltas, root_index, output, debug)


def run_program(source: str, debug: bool = False, filename: str = "<input>") -> Tuple[ASTNode, str]:
  """Parse and run RPAL source text"""
  tree = create_parser(debug).parse_string(source, filename)
  return evaluate_tree(tree, debug=debug)


def run_file(filepath: str, debug: bool = False) -> Tuple[ASTNode, str]:
  """Parse and run an RPAL source file"""
  tree = create_parser(debug).parse_file(filepath)
  return evaluate_tree(tree, debug=debug)


# ============================================================================
# FACTORY FUNCTIONS (for main.py)
# ============================================================================

def create_interpreter(debug: bool = False):
  """Factory function returning an interpreter"""
  return type('Interpreter', (), {
      'debug': debug,
      'run': lambda self, source: run_program(source, debug),
      'run_file': lambda self, filepath: run_file(filepath, debug),
      'run_tree': lambda self, tree: evaluate_tree(tree, debug=debug),
      'standardize': lambda self, tree: standardize(tree, debug)
  })()


def create_debug_interpreter():
  """Factory function returning a debug interpreter"""
  return create_interpreter(debug=True)
