"""
RPAL runtime environments
Each frame maps names to values and links to its parent frame
"""

from typing import Dict, Optional

from parsing import ASTNode
from values import copy_node
from utilities import unbound_identifier_error


class Environment:
  """Environment frame; bindings in a child shadow those of its ancestors.

  Values are copied when bound and again when looked up, so a value read
  from an environment can be changed freely without affecting the binding.
  """

  def __init__(self, parent: Optional['Environment'] = None):
    self.parent = parent
    self.bindings: Dict[str, ASTNode] = {}

  def bind(self, name: str, value: ASTNode) -> None:
    self.bindings[name] = copy_node(value)

  def is_bound(self, name: str) -> bool:
    env = self
    while env is not None:
      if name in env.bindings:
        return True
      env = env.parent
    return False

  def lookup(self, name: str) -> ASTNode:
    """Copy of the nearest binding of `name`; raises when unbound"""
    env = self
    while env is not None:
      if name in env.bindings:
        return copy_node(env.bindings[name])
      env = env.parent
    raise unbound_identifier_error(name)

  def depth(self) -> int:
    """Number of ancestor frames above this one"""
    count = 0
    env = self.parent
    while env is not None:
      count += 1
      env = env.parent
    return count

  def __repr__(self) -> str:
    return f"Environment(depth={self.depth()}, names={sorted(self.bindings)})"
