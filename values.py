"""
RPAL runtime values
Control structures, branch templates, recursion wrappers and tuples share the
ASTNode representation and are told apart by their `type` tag
"""

from typing import Any, List, Optional
from dataclasses import dataclass, field

from parsing import ASTNode


# ============================================================================
# RUNTIME VALUE KINDS
# ============================================================================

@dataclass
class Delta(ASTNode):
  """Control structure: the linearized body of a lambda or of the program.

  `body` is a stack whose top is the end of the list. `env` is the captured
  environment, attached when the structure is met as a value at run time.
  """
  type: str = "DELTA"
  index: int = 0
  bound_vars: List[str] = field(default_factory=list)
  body: List[ASTNode] = field(default_factory=list)
  env: Optional[Any] = field(default=None, repr=False)


@dataclass
class Beta(ASTNode):
  """Branch template: then/else bodies selected by a truth value"""
  type: str = "BETA"
  then_body: List[ASTNode] = field(default_factory=list)
  else_body: List[ASTNode] = field(default_factory=list)


@dataclass
class Eta(ASTNode):
  """Recursion wrapper around the closure produced by Y*"""
  type: str = "ETA"
  delta: Optional[Delta] = None


@dataclass
class TupleValue(ASTNode):
  """Aggregate: its elements are the children, in order"""
  type: str = "TUPLE"


@dataclass
class EnvMarker(ASTNode):
  """Control-stack entry restoring the caller's environment"""
  type: str = "ENV"
  env: Optional[Any] = field(default=None, repr=False)


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def make_integer(number: int) -> ASTNode:
  return ASTNode("INTEGER", str(number))


def make_string(text: str) -> ASTNode:
  return ASTNode("STRING", text)


def make_truth(flag: bool) -> ASTNode:
  return ASTNode("TRUE" if flag else "FALSE")


def make_dummy() -> ASTNode:
  return ASTNode("DUMMY")


# ============================================================================
# DEEP COPY
# ============================================================================

def copy_node(node: ASTNode) -> ASTNode:
  """Return a structurally equal clone sharing no mutable node with `node`.

  Captured environments are not part of a value and are shared by the clone.
  """
  node_type = node.type

  if node_type == "DELTA":
    return Delta(
        index=node.index,
        bound_vars=list(node.bound_vars),
        body=[copy_node(item) for item in node.body],
        env=node.env
    )
  elif node_type == "BETA":
    return Beta(
        then_body=[copy_node(item) for item in node.then_body],
        else_body=[copy_node(item) for item in node.else_body]
    )
  elif node_type == "ETA":
    return Eta(delta=copy_node(node.delta))
  elif node_type == "TUPLE":
    return TupleValue(children=[copy_node(child) for child in node.children])
  elif node_type == "ENV":
    return EnvMarker(env=node.env)

  return ASTNode(node.type, node.value, [copy_node(child) for child in node.children], node.arity)


# ============================================================================
# DISPLAY
# ============================================================================

KIND_NAMES = {
    "INTEGER": "integer",
    "STRING": "string",
    "TRUE": "truthvalue",
    "FALSE": "truthvalue",
    "TUPLE": "tuple",
    "DUMMY": "dummy",
    "DELTA": "function",
    "ETA": "function",
    "IDENTIFIER": "function",
    "YSTAR": "function",
}


def value_kind(node: ASTNode) -> str:
  """Human readable kind of a runtime value, for error messages"""
  return KIND_NAMES.get(node.type, node.type.lower())


def _first_bound_var(delta: Delta) -> str:
  return delta.bound_vars[0] if delta.bound_vars else "()"


def value_to_string(node: ASTNode) -> str:
  """Printed form of a runtime value"""
  node_type = node.type

  if node_type in ("INTEGER", "STRING", "IDENTIFIER"):
    return node.value
  elif node_type == "TRUE":
    return "true"
  elif node_type == "FALSE":
    return "false"
  elif node_type == "DUMMY":
    return "dummy"
  elif node_type == "NIL":
    return "nil"
  elif node_type == "YSTAR":
    return "Y*"
  elif node_type == "TUPLE":
    if not node.children:
      return "nil"
    return "(" + ", ".join(value_to_string(child) for child in node.children) + ")"
  elif node_type == "DELTA":
    return f"[lambda closure: {_first_bound_var(node)}: {node.index}]"
  elif node_type == "ETA":
    return f"[eta closure: {_first_bound_var(node.delta)}: {node.delta.index}]"

  return node_type.lower()
