"""
RPAL standardizer
Rewrites the raw tree in place into the canonical core of lambda, gamma,
equality binding, conditional and Y*
"""

from typing import Callable, Dict, List
import copy

from parsing import ASTNode


# ============================================================================
# EXCEPTION CLASS
# ============================================================================

class RPALStandardizeError(Exception):
  """Malformed tree met during standardization"""

  def __init__(self, message: str):
    self.message = message
    super().__init__(self._format_error())

  def _format_error(self) -> str:
    return f"Standardize error: {self.message}"


# ============================================================================
# HELPERS
# ============================================================================

# Kinds that may remain after standardization
CANONICAL_TYPES = {
    "IDENTIFIER", "INTEGER", "STRING", "TRUE", "FALSE", "NIL", "DUMMY", "YSTAR",
    "LAMBDA", "GAMMA", "EQUAL", "CONDITIONAL", "TAU", "COMMA", "PAREN",
    "OR", "AND", "NOT", "GR", "GE", "LS", "LE", "EQ", "NE",
    "PLUS", "MINUS", "NEG", "MULT", "DIV", "EXP", "AUG",
}


def expect_children(node: ASTNode, minimum: int, exact: bool = True) -> None:
  """Fail when `node` does not have the number of children its rule needs"""
  count = len(node.children)
  if count < minimum or (exact and count != minimum):
    wanted = f"{minimum}" if exact else f"at least {minimum}"
    raise RPALStandardizeError(f"{node.type}: expected {wanted} children, got {count}")


def lambda_chain(params: List[ASTNode], body: ASTNode) -> ASTNode:
  """Right-nest single-parameter lambdas: p1 p2 ... B => lambda(p1, lambda(p2, ... B))"""
  node = body
  for param in reversed(params):
    node = ASTNode("LAMBDA", children=[param, node])
  return node


# ============================================================================
# REWRITE RULES
# ============================================================================

def standardize_let(node: ASTNode, debug: bool = False) -> None:
  """let x = E in B  =>  gamma(lambda(x, B), E)"""
  expect_children(node, 2)
  equal, body = node.children
  if equal.type != "EQUAL":
    raise RPALStandardizeError("LET/WHERE: left child is not EQUAL")
  expect_children(equal, 2)
  name, value = equal.children
  equal.type = "LAMBDA"
  equal.children = [name, body]
  node.type = "GAMMA"
  node.children = [equal, value]


def standardize_where(node: ASTNode, debug: bool = False) -> None:
  """B where x = E  =>  let x = E in B"""
  expect_children(node, 2)
  body, definition = node.children
  node.type = "LET"
  node.children = [definition, body]
  standardize_let(node, debug)


def standardize_fcnform(node: ASTNode, debug: bool = False) -> None:
  """f p1 ... pn = B  =>  f = lambda(p1, ... lambda(pn, B))"""
  expect_children(node, 3, exact=False)
  name, *params, body = node.children
  node.type = "EQUAL"
  node.children = [name, lambda_chain(params, body)]


def standardize_lambda(node: ASTNode, debug: bool = False) -> None:
  """lambda(p1, ..., pn, B)  =>  lambda(p1, ... lambda(pn, B))"""
  expect_children(node, 2, exact=False)
  if len(node.children) == 2:
    return
  first, *params, body = node.children
  node.children = [first, lambda_chain(params, body)]


def standardize_at(node: ASTNode, debug: bool = False) -> None:
  """E1 @ N E2  =>  gamma(gamma(N, E1), E2)"""
  expect_children(node, 3)
  left, name, right = node.children
  node.type = "GAMMA"
  node.children = [ASTNode("GAMMA", children=[name, left]), right]


def standardize_within(node: ASTNode, debug: bool = False) -> None:
  """x1 = E1 within x2 = E2  =>  x2 = gamma(lambda(x1, E2), E1)"""
  expect_children(node, 2)
  inner, outer = node.children
  if inner.type != "EQUAL" or outer.type != "EQUAL":
    raise RPALStandardizeError("WITHIN: one of the children is not EQUAL")
  expect_children(inner, 2)
  expect_children(outer, 2)
  x1, e1 = inner.children
  x2, e2 = outer.children
  node.type = "EQUAL"
  node.children = [x2, ASTNode("GAMMA", children=[ASTNode("LAMBDA", children=[x1, e2]), e1])]


def standardize_simultdef(node: ASTNode, debug: bool = False) -> None:
  """x1 = E1 and ... and xn = En  =>  ,(x1 ... xn) = tau(E1 ... En)"""
  names = []
  values = []
  for child in node.children:
    if child.type != "EQUAL":
      raise RPALStandardizeError("SIMULTDEF: one of the children is not EQUAL")
    expect_children(child, 2)
    names.append(child.children[0])
    values.append(child.children[1])
  node.type = "EQUAL"
  node.children = [ASTNode("COMMA", children=names), ASTNode("TAU", children=values)]


def standardize_rec(node: ASTNode, debug: bool = False) -> None:
  """rec x = E  =>  x = gamma(Y*, lambda(x, E))"""
  expect_children(node, 1)
  equal = node.children[0]
  if equal.type != "EQUAL":
    raise RPALStandardizeError("REC: child is not EQUAL")
  expect_children(equal, 2)
  name, value = equal.children
  fixed_point = ASTNode("GAMMA", children=[ASTNode("YSTAR"), ASTNode("LAMBDA", children=[name, value])])
  node.type = "EQUAL"
  # The binding side gets its own copy of the name
  node.children = [copy.deepcopy(name), fixed_point]


STANDARDIZE_RULES: Dict[str, Callable[[ASTNode, bool], None]] = {
    "LET": standardize_let,
    "WHERE": standardize_where,
    "FCNFORM": standardize_fcnform,
    "LAMBDA": standardize_lambda,
    "AT": standardize_at,
    "WITHIN": standardize_within,
    "SIMULTDEF": standardize_simultdef,
    "REC": standardize_rec,
}


# ============================================================================
# TRAVERSAL
# ============================================================================

def standardize(node: ASTNode, debug: bool = False) -> ASTNode:
  """
  Standardize a tree in place, children before parent.
  Returns the same root node, now in canonical form.
  """
  for child in node.children:
    standardize(child, debug)

  rule = STANDARDIZE_RULES.get(node.type)
  if rule is not None:
    if debug:
      print(f"Standardizing: {node.type}")
    rule(node, debug)

  return node


def is_standardized(node: ASTNode) -> bool:
  """Whether every node in the tree is of a canonical kind"""
  if node.type not in CANONICAL_TYPES:
    return False
  if node.type == "LAMBDA" and len(node.children) != 2:
    return False
  return all(is_standardized(child) for child in node.children)
