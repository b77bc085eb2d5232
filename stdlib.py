"""
RPAL Standard Library
Primitive operators and the named built-in functions
Every operation takes and returns tree nodes; none mutates its operands
"""

from typing import Dict, Callable, List, TextIO
import operator
from utilities import (
  binary_comparison_op,
  binary_arithmetic_op,
  validate_operand_types,
  type_mismatch_error,
  operation_error,
  integer_value,
  truth_value,
  RPALRuntimeError
)
from values import (
  TupleValue,
  copy_node,
  make_integer,
  make_string,
  make_truth,
  make_dummy,
  value_to_string
)


# ============================================================================
# UTILITY FUNCTIONS
# ============================================================================

ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", "'": "'"}


def interpret_escapes(text: str) -> str:
  """Replace the escape sequences kept raw in string literals"""
  result = []
  i = 0
  while i < len(text):
    if text[i] == "\\" and i + 1 < len(text) and text[i + 1] in ESCAPES:
      result.append(ESCAPES[text[i + 1]])
      i += 2
    else:
      result.append(text[i])
      i += 1
  return "".join(result)


def _truncating_div(x: int, y: int) -> int:
  quotient = abs(x) // abs(y)
  return -quotient if (x < 0) != (y < 0) else quotient


# ============================================================================
# UNARY OPERATORS
# ============================================================================

def rpal_neg(x):
  """Integer negation"""
  validate_operand_types("neg", [x], ["INTEGER"], "integer")
  return make_integer(-integer_value(x))


def rpal_not(x):
  """Logical negation"""
  validate_operand_types("not", [x], ["TRUE", "FALSE"], "truthvalue")
  return make_truth(not truth_value(x))


# ============================================================================
# ARITHMETIC OPERATORS
# ============================================================================

_rpal_plus_impl = binary_arithmetic_op(operator.add, "+")
_rpal_minus_impl = binary_arithmetic_op(operator.sub, "-")
_rpal_mult_impl = binary_arithmetic_op(operator.mul, "*")


def rpal_plus(x, y):
  return _rpal_plus_impl(x, y, make_integer)


def rpal_minus(x, y):
  return _rpal_minus_impl(x, y, make_integer)


def rpal_mult(x, y):
  return _rpal_mult_impl(x, y, make_integer)


def rpal_div(x, y):
  """Integer division, truncating toward zero"""
  validate_operand_types("/", [x, y], ["INTEGER"], "integer")
  if integer_value(y) == 0:
    raise RPALRuntimeError("Division by zero")
  return make_integer(_truncating_div(integer_value(x), integer_value(y)))


def rpal_exp(x, y):
  """Exponentiation; a negative exponent truncates the fractional result"""
  validate_operand_types("**", [x, y], ["INTEGER"], "integer")
  base, power = integer_value(x), integer_value(y)
  if power >= 0:
    return make_integer(base ** power)
  if base == 0:
    raise RPALRuntimeError("Division by zero: 0 raised to a negative power")
  return make_integer(int(base ** power))


# ============================================================================
# COMPARISON OPERATORS
# ============================================================================

_rpal_gr_impl = binary_comparison_op(operator.gt, "gr")
_rpal_ge_impl = binary_comparison_op(operator.ge, "ge")
_rpal_ls_impl = binary_comparison_op(operator.lt, "ls")
_rpal_le_impl = binary_comparison_op(operator.le, "le")
_rpal_eq_impl = binary_comparison_op(operator.eq, "eq", ["INTEGER", "STRING", "TRUE", "FALSE"])
_rpal_ne_impl = binary_comparison_op(operator.ne, "ne", ["INTEGER", "STRING", "TRUE", "FALSE"])


def rpal_gr(x, y):
  return _rpal_gr_impl(x, y, make_truth)


def rpal_ge(x, y):
  return _rpal_ge_impl(x, y, make_truth)


def rpal_ls(x, y):
  return _rpal_ls_impl(x, y, make_truth)


def rpal_le(x, y):
  return _rpal_le_impl(x, y, make_truth)


def rpal_eq(x, y):
  return _rpal_eq_impl(x, y, make_truth)


def rpal_ne(x, y):
  return _rpal_ne_impl(x, y, make_truth)


# ============================================================================
# LOGICAL AND TUPLE OPERATORS
# ============================================================================

def rpal_or(x, y):
  validate_operand_types("or", [x, y], ["TRUE", "FALSE"], "truthvalue")
  return make_truth(truth_value(x) or truth_value(y))


def rpal_and(x, y):
  validate_operand_types("&", [x, y], ["TRUE", "FALSE"], "truthvalue")
  return make_truth(truth_value(x) and truth_value(y))


def rpal_aug(x, y):
  """Tuple extended by one element; the right operand is never spliced"""
  validate_operand_types("aug", [x], ["TUPLE"], "tuple")
  return TupleValue(children=[copy_node(child) for child in x.children] + [copy_node(y)])


UNARY_OPERATORS: Dict[str, Callable] = {
    "NEG": rpal_neg,
    "NOT": rpal_not,
}

BINARY_OPERATORS: Dict[str, Callable] = {
    "PLUS": rpal_plus,
    "MINUS": rpal_minus,
    "MULT": rpal_mult,
    "DIV": rpal_div,
    "EXP": rpal_exp,
    "GR": rpal_gr,
    "GE": rpal_ge,
    "LS": rpal_ls,
    "LE": rpal_le,
    "EQ": rpal_eq,
    "NE": rpal_ne,
    "OR": rpal_or,
    "AND": rpal_and,
    "AUG": rpal_aug,
}


# ============================================================================
# PRINT FUNCTIONS
# ============================================================================

def rpal_print(value, output: TextIO):
  """Write a value's printed form to the program output"""
  output.write(interpret_escapes(value_to_string(value)))
  return make_dummy()


# ============================================================================
# STRING FUNCTIONS
# ============================================================================

def rpal_stem(value):
  """First character of a string"""
  if value.type != "STRING":
    raise type_mismatch_error("Stem", "argument", "string", value)
  if not value.value:
    raise RPALRuntimeError("Stem: empty string")
  return make_string(value.value[0])


def rpal_stern(value):
  """All but the first character of a string"""
  if value.type != "STRING":
    raise type_mismatch_error("Stern", "argument", "string", value)
  if not value.value:
    raise RPALRuntimeError("Stern: empty string")
  return make_string(value.value[1:])


def rpal_conc(x, y):
  """Concatenate two strings or two tuples"""
  if x.type == "STRING" and y.type == "STRING":
    return make_string(x.value + y.value)
  elif x.type == "TUPLE" and y.type == "TUPLE":
    return TupleValue(children=[copy_node(child) for child in x.children + y.children])
  raise operation_error("Conc", x, y)


def rpal_itos(value):
  if value.type != "INTEGER":
    raise type_mismatch_error("ItoS", "argument", "integer", value)
  return make_string(value.value)


# ============================================================================
# TUPLE FUNCTIONS
# ============================================================================

def rpal_order(value):
  """Number of elements of a tuple"""
  if value.type != "TUPLE":
    raise type_mismatch_error("Order", "argument", "tuple", value)
  return make_integer(len(value.children))


def rpal_null(value):
  if value.type != "TUPLE":
    raise type_mismatch_error("Null", "argument", "tuple", value)
  return make_truth(not value.children)


# ============================================================================
# TYPE PREDICATES
# ============================================================================

def make_type_predicate(*value_types: str) -> Callable:
  """Build a predicate testing whether a value's type tag is one of `value_types`"""
  def predicate(value):
    return make_truth(value.type in value_types)
  return predicate


def rpal_identity(value):
  return copy_node(value)


# ============================================================================
# BUILT-IN FUNCTION REGISTRY
# ============================================================================

def make_builtin(name: str, func: Callable, arity: int = 1, needs_output: bool = False) -> Dict:
  """Create a built-in function descriptor"""
  return {
      'name': name,
      'func': func,
      'arity': arity,
      'needs_output': needs_output
  }


BUILTIN_FUNCTIONS: Dict[str, Dict] = {
    # I/O functions
    "Print": make_builtin("Print", rpal_print, needs_output=True),
    "print": make_builtin("print", rpal_print, needs_output=True),

    # String functions
    "Stem": make_builtin("Stem", rpal_stem),
    "Stern": make_builtin("Stern", rpal_stern),
    "Conc": make_builtin("Conc", rpal_conc, arity=2),
    "ItoS": make_builtin("ItoS", rpal_itos),

    # Tuple functions
    "Order": make_builtin("Order", rpal_order),
    "Null": make_builtin("Null", rpal_null),

    # Type predicates
    "Isinteger": make_builtin("Isinteger", make_type_predicate("INTEGER")),
    "Isstring": make_builtin("Isstring", make_type_predicate("STRING")),
    "Istuple": make_builtin("Istuple", make_type_predicate("TUPLE")),
    "Istruthvalue": make_builtin("Istruthvalue", make_type_predicate("TRUE", "FALSE")),
    "Isfunction": make_builtin("Isfunction", make_type_predicate("DELTA", "ETA", "IDENTIFIER")),
    "Isdummy": make_builtin("Isdummy", make_type_predicate("DUMMY")),

    "Identity": make_builtin("Identity", rpal_identity),
}


def get_builtin_function(name: str) -> Dict:
  """Get a built-in function by name"""
  if name in BUILTIN_FUNCTIONS:
    return BUILTIN_FUNCTIONS[name]
  else:
    raise RPALRuntimeError(f"Unknown built-in function: {name}")


def list_builtin_functions() -> List[str]:
  """List all available built-in functions"""
  return list(BUILTIN_FUNCTIONS.keys())
