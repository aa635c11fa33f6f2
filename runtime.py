"""
Kestrel runtime environment
Chained name -> Data scopes; closures hold on to the scope they were declared in
"""

import sys
from typing import Dict, Iterator, Optional, TextIO

from data import Data
from error_handling import UndefinedVariableError


class Environment:
  """
  One lexical scope.

  Lookups walk outward through `parent` links. The root scope owns the output
  sink used by `print` and the debug flag; child scopes inherit both.
  """

  def __init__(self, bindings: Optional[Dict[str, Data]] = None,
               parent: Optional['Environment'] = None,
               output: Optional[TextIO] = None,
               debug: Optional[bool] = None):
    self.bindings: Dict[str, Data] = bindings if bindings is not None else {}
    self.parent = parent
    self._output = output
    if debug is None:
      debug = parent.debug if parent is not None else False
    self.debug = debug

  @property
  def output(self) -> TextIO:
    if self._output is not None:
      return self._output
    if self.parent is not None:
      return self.parent.output
    return sys.stdout

  def _owner(self, name: str) -> Optional['Environment']:
    """Nearest scope on the chain that binds `name`"""
    env = self
    while env is not None:
      if name in env.bindings:
        return env
      env = env.parent
    return None

  def lookup(self, name: str) -> Data:
    owner = self._owner(name)
    if owner is None:
      raise UndefinedVariableError(name)
    return owner.bindings[name]

  def define(self, name: str, value: Data) -> None:
    """Bind in this scope only, shadowing any outer binding"""
    self.bindings[name] = value

  def define_or_assign(self, name: str, value: Data) -> None:
    """
    Overwrite `name` in the nearest scope that already binds it; a name bound
    nowhere is created in this scope.
    """
    owner = self._owner(name)
    if owner is None:
      owner = self
    owner.bindings[name] = value

  def child_scope(self, bindings: Optional[Dict[str, Data]] = None) -> 'Environment':
    return Environment(dict(bindings or {}), parent=self)

  def depth(self) -> int:
    depth, env = 0, self.parent
    while env is not None:
      depth, env = depth + 1, env.parent
    return depth

  def __contains__(self, name: str) -> bool:
    return self._owner(name) is not None

  def __iter__(self) -> Iterator[str]:
    """Names visible from this scope, innermost first, without duplicates"""
    seen = set()
    env = self
    while env is not None:
      for name in env.bindings:
        if name not in seen:
          seen.add(name)
          yield name
      env = env.parent

  def __repr__(self) -> str:
    return f"<Environment depth={self.depth()} bindings={list(self.bindings.keys())}>"
