"""
Control-structure builder tests
"""

import pytest
from parsing import ASTNode
from control import build_control_structures, make_instruction, bound_variables
from semantics import RPALStandardizeError
from values import Delta, Beta


def body_types(body):
  return [item.type for item in body]


class TestControlStructures:
  """Test linearization of standardized trees"""

  def test_single_expression(self, standardized):
    deltas, root_index = build_control_structures(standardized("1 + 2"))
    assert root_index == 0
    assert len(deltas) == 1
    assert body_types(deltas[0].body) == ["PLUS", "INTEGER", "INTEGER"]
    assert deltas[0].body[0].children == []

  def test_lambda_creates_structure(self, standardized):
    deltas, root_index = build_control_structures(standardized("let x = 5 in x"))
    assert len(deltas) == 2
    root = deltas[root_index]
    assert body_types(root.body) == ["GAMMA", "DELTA", "INTEGER"]
    assert root.body[1] is deltas[1]
    assert deltas[1].bound_vars == ["x"]
    assert body_types(deltas[1].body) == ["IDENTIFIER"]

  def test_indices_are_breadth_first(self, standardized):
    tree = standardized("(fn a . fn b . a), (fn c . c)")
    deltas, root_index = build_control_structures(tree)
    assert [delta.index for delta in deltas] == list(range(len(deltas)))
    assert root_index == 0
    # Both top-level lambdas are discovered before the nested one
    assert deltas[1].bound_vars == ["a"]
    assert deltas[2].bound_vars == ["c"]
    assert deltas[3].bound_vars == ["b"]

  def test_tuple_parameter(self, standardized):
    deltas, _ = build_control_structures(standardized("fn (x, y) . x"))
    assert deltas[1].bound_vars == ["x", "y"]

  def test_empty_parameter(self, standardized):
    deltas, _ = build_control_structures(standardized("fn () . 1"))
    assert deltas[1].bound_vars == []

  def test_conditional_becomes_beta(self, standardized):
    deltas, _ = build_control_structures(standardized("true -> 1 | 'no'"))
    body = deltas[0].body
    assert body_types(body) == ["BETA", "TRUE"]
    beta = body[0]
    assert isinstance(beta, Beta)
    assert body_types(beta.then_body) == ["INTEGER"]
    assert body_types(beta.else_body) == ["STRING"]

  def test_tau_records_arity(self, standardized):
    deltas, _ = build_control_structures(standardized("1, 2, 3"))
    tau = deltas[0].body[0]
    assert tau.type == "TAU"
    assert tau.arity == 3
    assert tau.children == []

  def test_tree_is_not_aliased(self, standardized):
    tree = standardized("1 + 2")
    deltas, _ = build_control_structures(tree)
    assert deltas[0].body[0] is not tree
    assert deltas[0].body[1] is not tree.children[0]


class TestHelpers:
  """Test instruction and parameter helpers"""

  def test_make_instruction_drops_children(self):
    node = ASTNode("GAMMA", children=[ASTNode("IDENTIFIER", "f"), ASTNode("INTEGER", "1")])
    instruction = make_instruction(node)
    assert instruction.type == "GAMMA"
    assert instruction.children == []
    assert instruction.arity == 0

  def test_bound_variables_rejects_literal(self):
    with pytest.raises(RPALStandardizeError):
      bound_variables(ASTNode("INTEGER", "1"))

  def test_comma_of_non_identifiers(self):
    param = ASTNode("COMMA", children=[ASTNode("IDENTIFIER", "a"), ASTNode("INTEGER", "2")])
    with pytest.raises(RPALStandardizeError):
      bound_variables(param)

  def test_malformed_conditional(self):
    tree = ASTNode("CONDITIONAL", children=[ASTNode("TRUE"), ASTNode("INTEGER", "1")])
    with pytest.raises(RPALStandardizeError):
      build_control_structures(tree)

  def test_root_delta_type(self, standardized):
    deltas, root_index = build_control_structures(standardized("dummy"))
    assert isinstance(deltas[root_index], Delta)
    assert deltas[root_index].bound_vars == []
