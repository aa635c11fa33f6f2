"""
Kestrel runtime values
Every evaluation produces exactly one of the Data variants below
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from error_handling import ArityMismatchError


class Data:
  """Base of the closed set of runtime value kinds"""

  type_name = "Data"

  def __str__(self) -> str:
    raise NotImplementedError


@dataclass(frozen=True)
class IntData(Data):
  value: int
  type_name = "Int"

  def __str__(self) -> str:
    return str(self.value)


@dataclass(frozen=True)
class StringData(Data):
  value: str
  type_name = "Str"

  def __str__(self) -> str:
    return self.value


@dataclass(frozen=True)
class BoolData(Data):
  value: bool
  type_name = "Bool"

  def __str__(self) -> str:
    return "true" if self.value else "false"


@dataclass(frozen=True)
class NoneData(Data):
  type_name = "None"

  def __str__(self) -> str:
    return "None"


NONE = NoneData()


@dataclass(frozen=True)
class ListData(Data):
  elements: List[Data] = field(default_factory=list)
  type_name = "List"

  def __str__(self) -> str:
    return "[" + ", ".join(str(e) for e in self.elements) + "]"


@dataclass(frozen=True)
class ObjectData(Data):
  """Record value; key order is not significant"""
  properties: Dict[str, Data] = field(default_factory=dict)
  type_name = "Record"

  def __str__(self) -> str:
    return "{" + ", ".join(f"{k}: {v}" for k, v in self.properties.items()) + "}"


@dataclass(frozen=True, eq=False)
class FunctionData(Data):
  """
  A user-defined function together with the environment it was declared in.

  The closure is held by reference: later assignments to captured variables
  are visible inside the body when the function runs.
  """
  parameters: List[str]
  body: Any
  closure: Any
  name: str = ""
  type_name = "Function"

  def invoke(self, args: List[Data]) -> Data:
    """Run the body in a fresh child scope of the closure"""
    if len(args) != len(self.parameters):
      raise ArityMismatchError(len(self.parameters), len(args), self.name or None)
    scope = self.closure.child_scope(dict(zip(self.parameters, args)))
    return self.body.eval(scope)

  def __str__(self) -> str:
    return f"Function({', '.join(self.parameters)})"


def type_name_of(value: Data) -> str:
  """Variant name used in error messages"""
  return getattr(value, 'type_name', type(value).__name__)
