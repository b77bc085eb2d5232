"""
Utilities module for the RPAL interpreter
Runtime error type, error message builders and operator factories shared by
the machine and the standard library
"""

from typing import Any, Callable, List, Optional

from parsing import ASTNode
from values import value_kind, value_to_string


# ==================== EXCEPTION CLASS ====================

class RPALRuntimeError(Exception):
  """RPAL runtime error raised by the CSE machine"""

  def __init__(self, message: str):
    self.message = message
    super().__init__(self._format_error())

  def _format_error(self) -> str:
    return f"Runtime error: {self.message}"


# ==================== ERROR MESSAGE BUILDERS ====================

def type_mismatch_error(
  func_name: str,
  param_name: str,
  expected: str,
  actual: ASTNode
) -> RPALRuntimeError:
  """
  Generate type mismatch error

  Args:
    func_name: Operator or function name
    param_name: Which operand or argument was wrong
    expected: Expected value kind
    actual: The offending value

  Returns:
    RPALRuntimeError with formatted message
  """
  return RPALRuntimeError(
    f"{func_name} requires {expected} for {param_name}, got {value_kind(actual)}"
  )


def arity_error(func_name: str, expected: int, got: int) -> RPALRuntimeError:
  """
  Generate arity mismatch error

  Args:
    func_name: Function name
    expected: Expected number of arguments
    got: Actual number of arguments

  Returns:
    RPALRuntimeError with formatted message
  """
  return RPALRuntimeError(
    f"{func_name} requires {expected} arguments, got {got}"
  )


def operation_error(
  op: str,
  left: ASTNode,
  right: ASTNode
) -> RPALRuntimeError:
  """
  Generate operation error

  Args:
    op: Operator name
    left: Left operand
    right: Right operand

  Returns:
    RPALRuntimeError with formatted message
  """
  return RPALRuntimeError(
    f"Cannot apply {op} to {value_kind(left)} and {value_kind(right)}"
  )


def unbound_identifier_error(name: str) -> RPALRuntimeError:
  return RPALRuntimeError(f"Undeclared identifier: <ID:{name}>")


def application_error(rator: ASTNode) -> RPALRuntimeError:
  return RPALRuntimeError(
    f"Cannot apply {value_kind(rator)} {value_to_string(rator)}"
  )


# ==================== VALIDATION UTILITIES ====================

def validate_operand_types(
  op_name: str,
  operands: List[ASTNode],
  allowed_types: List[str],
  expected: str
) -> None:
  """
  Check every operand's type tag is one of `allowed_types`

  Raises:
    RPALRuntimeError naming the first offending operand
  """
  for i, operand in enumerate(operands):
    if operand.type not in allowed_types:
      position = "operand" if len(operands) == 1 else ("left operand" if i == 0 else "right operand")
      raise type_mismatch_error(op_name, position, expected, operand)


def integer_value(node: ASTNode) -> int:
  return int(node.value)


def truth_value(node: ASTNode) -> bool:
  return node.type == "TRUE"


# ==================== BINARY OPERATION FACTORIES ====================

def binary_comparison_op(
  op: Callable[[Any, Any], bool],
  op_name: str,
  allowed_types: Optional[List[str]] = None
) -> Callable[[ASTNode, ASTNode, Callable], ASTNode]:
  """
  Factory for binary comparison operations

  Args:
    op: Python operator function (e.g., operator.lt)
    op_name: Name for error messages
    allowed_types: Value kinds that support this operation; both operands
      must have the same kind (TRUE and FALSE count as one kind)

  Returns:
    Function that performs the comparison

  Examples:
    rpal_ls = binary_comparison_op(operator.lt, "ls")
    result = rpal_ls(make_integer(1), make_integer(2), make_truth)
  """
  if allowed_types is None:
    allowed_types = ["INTEGER"]

  def comparison(x: ASTNode, y: ASTNode, make_truth: Callable) -> ASTNode:
    if x.type not in allowed_types or y.type not in allowed_types:
      raise operation_error(op_name, x, y)
    if value_kind(x) != value_kind(y):
      raise operation_error(op_name, x, y)
    if x.type == "INTEGER":
      return make_truth(op(integer_value(x), integer_value(y)))
    if x.type == "STRING":
      return make_truth(op(x.value, y.value))
    return make_truth(op(truth_value(x), truth_value(y)))

  return comparison


def binary_arithmetic_op(
  op: Callable[[int, int], int],
  op_name: str
) -> Callable[[ASTNode, ASTNode, Callable], ASTNode]:
  """
  Factory for binary integer arithmetic operations

  Examples:
    rpal_plus = binary_arithmetic_op(operator.add, "+")
    result = rpal_plus(make_integer(1), make_integer(2), make_integer)
  """
  def arithmetic(x: ASTNode, y: ASTNode, make_integer: Callable) -> ASTNode:
    validate_operand_types(op_name, [x, y], ["INTEGER"], "integer")
    return make_integer(op(integer_value(x), integer_value(y)))

  return arithmetic
