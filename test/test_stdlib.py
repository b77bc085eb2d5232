"""
Operator and built-in function tests
"""

import io
import pytest
from interpreter import run_program
from stdlib import (
  BINARY_OPERATORS, UNARY_OPERATORS, BUILTIN_FUNCTIONS,
  interpret_escapes, rpal_print, get_builtin_function
)
from values import TupleValue, make_integer, make_string, make_truth, value_to_string
from utilities import RPALRuntimeError


def run(source):
  result, _ = run_program(source)
  return value_to_string(result)


class TestOperators:
  """Primitive operators applied directly"""

  def test_arithmetic(self):
    assert BINARY_OPERATORS["PLUS"](make_integer(2), make_integer(3)).value == "5"
    assert BINARY_OPERATORS["MINUS"](make_integer(2), make_integer(3)).value == "-1"
    assert BINARY_OPERATORS["MULT"](make_integer(4), make_integer(3)).value == "12"
    assert BINARY_OPERATORS["EXP"](make_integer(2), make_integer(8)).value == "256"

  @pytest.mark.parametrize("left, right, expected", [
      (7, 2, "3"),
      (-7, 2, "-3"),
      (7, -2, "-3"),
      (-7, -2, "3"),
  ])
  def test_division_truncates_toward_zero(self, left, right, expected):
    assert BINARY_OPERATORS["DIV"](make_integer(left), make_integer(right)).value == expected

  def test_division_by_zero(self):
    with pytest.raises(RPALRuntimeError, match="Division by zero"):
      BINARY_OPERATORS["DIV"](make_integer(1), make_integer(0))

  def test_negative_exponent(self):
    assert BINARY_OPERATORS["EXP"](make_integer(2), make_integer(-1)).value == "0"
    assert BINARY_OPERATORS["EXP"](make_integer(1), make_integer(-3)).value == "1"
    with pytest.raises(RPALRuntimeError):
      BINARY_OPERATORS["EXP"](make_integer(0), make_integer(-1))

  def test_arithmetic_requires_integers(self):
    with pytest.raises(RPALRuntimeError, match="integer"):
      BINARY_OPERATORS["PLUS"](make_integer(1), make_string("a"))

  def test_comparisons(self):
    assert BINARY_OPERATORS["GR"](make_integer(3), make_integer(2)).type == "TRUE"
    assert BINARY_OPERATORS["LE"](make_integer(3), make_integer(2)).type == "FALSE"
    with pytest.raises(RPALRuntimeError):
      BINARY_OPERATORS["LS"](make_string("a"), make_string("b"))

  def test_equality_kinds(self):
    assert BINARY_OPERATORS["EQ"](make_string("a"), make_string("a")).type == "TRUE"
    assert BINARY_OPERATORS["EQ"](make_truth(True), make_truth(False)).type == "FALSE"
    assert BINARY_OPERATORS["NE"](make_integer(1), make_integer(2)).type == "TRUE"
    with pytest.raises(RPALRuntimeError, match="Cannot apply eq"):
      BINARY_OPERATORS["EQ"](make_integer(1), make_string("1"))

  def test_logic(self):
    assert BINARY_OPERATORS["OR"](make_truth(False), make_truth(True)).type == "TRUE"
    assert BINARY_OPERATORS["AND"](make_truth(False), make_truth(True)).type == "FALSE"
    assert UNARY_OPERATORS["NOT"](make_truth(False)).type == "TRUE"
    with pytest.raises(RPALRuntimeError):
      UNARY_OPERATORS["NOT"](make_integer(0))

  def test_neg(self):
    assert UNARY_OPERATORS["NEG"](make_integer(5)).value == "-5"
    with pytest.raises(RPALRuntimeError):
      UNARY_OPERATORS["NEG"](make_truth(True))

  def test_aug_appends_one_element(self):
    pair = TupleValue(children=[make_integer(1), make_integer(2)])
    result = BINARY_OPERATORS["AUG"](TupleValue(), pair)
    assert value_to_string(result) == "((1, 2))"
    with pytest.raises(RPALRuntimeError, match="tuple"):
      BINARY_OPERATORS["AUG"](make_integer(1), make_integer(2))


class TestBuiltins:
  """Named built-in functions through programs"""

  def test_stem_and_stern(self):
    assert run("Stem 'hello'") == "h"
    assert run("Stern 'hello'") == "ello"
    with pytest.raises(RPALRuntimeError, match="empty string"):
      run_program("Stem ''")

  def test_conc_is_curried(self):
    assert run("Conc 'ab' 'cd'") == "abcd"
    assert run("let c = Conc 'x' in c 'y'") == "xy"
    assert run("Conc (1, 2) (3, 4)") == "(1, 2, 3, 4)"
    with pytest.raises(RPALRuntimeError):
      run_program("Conc 'a' 1")

  def test_order_and_null(self):
    assert run("Order (1, 2, 3)") == "3"
    assert run("Order nil") == "0"
    assert run("Null nil") == "true"
    assert run("Null (1, 2)") == "false"

  def test_itos(self):
    assert run("ItoS 42") == "42"
    assert run("Isstring (ItoS 42)") == "true"

  def test_type_predicates(self):
    assert run("Isinteger 3") == "true"
    assert run("Isinteger 'a'") == "false"
    assert run("Istuple nil") == "true"
    assert run("Istruthvalue false") == "true"
    assert run("Isdummy dummy") == "true"
    assert run("Isfunction (fn x . x)") == "true"
    assert run("Isfunction Print") == "true"
    assert run("Isfunction 3") == "false"

  def test_identity(self):
    assert run("Identity (1, 'a')") == "(1, a)"

  def test_lowercase_print(self):
    _, output = run_program("print 7")
    assert output == "7"

  def test_print_closure(self):
    _, output = run_program("Print (fn x . x)")
    assert output == "[lambda closure: x: 1]"


class TestHelpers:

  def test_interpret_escapes(self):
    assert interpret_escapes(r"a\nb\tc") == "a\nb\tc"
    assert interpret_escapes(r"it\'s") == "it's"
    assert interpret_escapes("plain\\") == "plain\\"

  def test_rpal_print_writes_to_stream(self):
    stream = io.StringIO()
    result = rpal_print(make_integer(3), output=stream)
    assert stream.getvalue() == "3"
    assert result.type == "DUMMY"

  def test_registry(self):
    assert BUILTIN_FUNCTIONS["Conc"]['arity'] == 2
    assert get_builtin_function("Print")['needs_output']
    with pytest.raises(RPALRuntimeError):
      get_builtin_function("Missing")
