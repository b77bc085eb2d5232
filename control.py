"""
RPAL control-structure builder
Linearizes a standardized tree into indexed control structures for the CSE
machine. Structures are discovered breadth-first; the program is structure 0.
"""

from typing import List, Tuple
from collections import deque

from parsing import ASTNode, node_label
from values import Delta, Beta
from semantics import RPALStandardizeError


def make_instruction(node: ASTNode) -> ASTNode:
  """Childless copy of a tree node placed in a control body"""
  arity = len(node.children) if node.type == "TAU" else 0
  return ASTNode(node.type, node.value, [], arity)


def bound_variables(param: ASTNode) -> List[str]:
  """Names bound by a lambda parameter: x, (x, y, ...) or ()"""
  if param.type == "IDENTIFIER":
    return [param.value]
  elif param.type == "COMMA":
    names = []
    for child in param.children:
      if child.type != "IDENTIFIER":
        raise RPALStandardizeError(f"LAMBDA: tuple parameter holds {node_label(child)}")
      names.append(child.value)
    return names
  elif param.type == "PAREN":
    return []
  raise RPALStandardizeError(f"LAMBDA: unsupported parameter {node_label(param)}")


def build_control_structures(root: ASTNode, debug: bool = False) -> Tuple[List[Delta], int]:
  """
  Build every control structure reachable from `root`.
  Returns (deltas, root_index) with deltas[i].index == i.
  """
  deltas: List[Delta] = []
  pending = deque()

  def new_delta(start: ASTNode, names: List[str]) -> Delta:
    delta = Delta(index=len(deltas), bound_vars=names)
    deltas.append(delta)
    pending.append((delta, start))
    if debug:
      print(f"Created control structure {delta.index} binding {names}")
    return delta

  def linearize(node: ASTNode, body: List[ASTNode]) -> None:
    if node.type == "LAMBDA":
      if len(node.children) != 2:
        raise RPALStandardizeError("LAMBDA: expected a parameter and a body")
      param, lambda_body = node.children
      body.append(new_delta(lambda_body, bound_variables(param)))
      return

    if node.type == "CONDITIONAL":
      if len(node.children) != 3:
        raise RPALStandardizeError("CONDITIONAL: expected condition, then and else parts")
      condition, then_part, else_part = node.children
      beta = Beta()
      linearize(then_part, beta.then_body)
      linearize(else_part, beta.else_body)
      body.append(beta)
      linearize(condition, body)
      return

    body.append(make_instruction(node))
    for child in node.children:
      linearize(child, body)

  root_delta = new_delta(root, [])
  while pending:
    delta, start = pending.popleft()
    linearize(start, delta.body)

  return deltas, root_delta.index
