"""
Value model and environment tests
"""

import pytest
from parsing import ASTNode
from values import (
  Delta, Beta, Eta, TupleValue, EnvMarker,
  copy_node, value_to_string, value_kind,
  make_integer, make_string, make_truth, make_dummy
)
from environment import Environment
from utilities import RPALRuntimeError


def sample_delta():
  return Delta(
      index=2,
      bound_vars=["x"],
      body=[ASTNode("PLUS"), ASTNode("IDENTIFIER", "x"), make_integer(1)],
      env=Environment()
  )


class TestDeepCopy:
  """copy_node returns equal values sharing no mutable node"""

  def test_tuple_copy_is_independent(self):
    original = TupleValue(children=[make_integer(1), TupleValue(children=[make_string("a")])])
    clone = copy_node(original)
    assert clone == original
    clone.children[1].children[0].value = "changed"
    clone.children.append(make_dummy())
    assert value_to_string(original) == "(1, (a))"

  def test_delta_copy_shares_environment(self):
    delta = sample_delta()
    clone = copy_node(delta)
    assert isinstance(clone, Delta)
    assert clone.env is delta.env
    assert clone.body == delta.body
    assert clone.body[1] is not delta.body[1]
    clone.bound_vars.append("y")
    assert delta.bound_vars == ["x"]

  def test_eta_copy(self):
    eta = Eta(delta=sample_delta())
    clone = copy_node(eta)
    assert isinstance(clone, Eta)
    assert clone.delta is not eta.delta
    assert clone.delta.index == 2

  def test_beta_copy(self):
    beta = Beta(then_body=[make_integer(1)], else_body=[make_integer(2)])
    clone = copy_node(beta)
    assert clone == beta
    assert clone.then_body[0] is not beta.then_body[0]

  def test_plain_node_keeps_arity(self):
    tau = ASTNode("TAU", arity=3)
    assert copy_node(tau).arity == 3

  def test_env_marker_copy(self):
    env = Environment()
    assert copy_node(EnvMarker(env=env)).env is env


class TestValueToString:
  """Printed forms of runtime values"""

  def test_scalars(self):
    assert value_to_string(make_integer(42)) == "42"
    assert value_to_string(make_string("hi")) == "hi"
    assert value_to_string(make_truth(True)) == "true"
    assert value_to_string(make_truth(False)) == "false"
    assert value_to_string(make_dummy()) == "dummy"

  def test_tuples(self):
    value = TupleValue(children=[make_integer(1), make_integer(2), make_integer(3)])
    assert value_to_string(value) == "(1, 2, 3)"
    assert value_to_string(TupleValue()) == "nil"

  def test_closures(self):
    delta = sample_delta()
    assert value_to_string(delta) == "[lambda closure: x: 2]"
    assert value_to_string(Eta(delta=delta)) == "[eta closure: x: 2]"
    assert value_to_string(Delta(index=4)) == "[lambda closure: (): 4]"

  def test_builtin_name(self):
    assert value_to_string(ASTNode("IDENTIFIER", "Print")) == "Print"

  def test_value_kind(self):
    assert value_kind(make_truth(False)) == "truthvalue"
    assert value_kind(TupleValue()) == "tuple"
    assert value_kind(sample_delta()) == "function"


class TestEnvironment:
  """Parent-linked environment frames"""

  def test_lookup_through_parent(self):
    root = Environment()
    root.bind("x", make_integer(1))
    child = Environment(parent=root)
    assert child.lookup("x").value == "1"
    assert child.depth() == 1

  def test_child_shadows_parent(self):
    root = Environment()
    root.bind("x", make_integer(1))
    child = Environment(parent=root)
    child.bind("x", make_integer(2))
    assert child.lookup("x").value == "2"
    assert root.lookup("x").value == "1"

  def test_bind_and_lookup_copy(self):
    env = Environment()
    value = TupleValue(children=[make_integer(1)])
    env.bind("t", value)
    value.children.append(make_integer(2))
    first = env.lookup("t")
    first.children.append(make_integer(3))
    assert value_to_string(env.lookup("t")) == "(1)"

  def test_unbound_name(self):
    env = Environment(parent=Environment())
    assert not env.is_bound("missing")
    with pytest.raises(RPALRuntimeError, match="Undeclared identifier: <ID:missing>"):
      env.lookup("missing")
