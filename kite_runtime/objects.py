"""Kite runtime values.

Integer, Boolean, String and Null are the values a program computes.
ReturnValue wraps a value travelling out of a ``return`` statement.
Function pairs a function literal with the environment it closes over.
"""

from __future__ import annotations

import dataclasses
from typing import ClassVar

from kite.ast_nodes import BlockStatement, Identifier


class KiteObject:
    type_name: ClassVar[str] = "OBJECT"

    def inspect(self) -> str:
        raise NotImplementedError


@dataclasses.dataclass(frozen=True)
class Integer(KiteObject):
    type_name: ClassVar[str] = "INTEGER"
    value: int

    def inspect(self) -> str:
        return str(self.value)


@dataclasses.dataclass(frozen=True)
class Boolean(KiteObject):
    type_name: ClassVar[str] = "BOOLEAN"
    value: bool

    def inspect(self) -> str:
        return "true" if self.value else "false"


@dataclasses.dataclass(frozen=True)
class String(KiteObject):
    type_name: ClassVar[str] = "STRING"
    value: str

    def inspect(self) -> str:
        return self.value


class Null(KiteObject):
    type_name: ClassVar[str] = "NULL"

    def inspect(self) -> str:
        return "null"

    def __repr__(self) -> str:
        return "Null()"


@dataclasses.dataclass(frozen=True)
class ReturnValue(KiteObject):
    type_name: ClassVar[str] = "RETURN_VALUE"
    value: KiteObject

    def inspect(self) -> str:
        return self.value.inspect()


@dataclasses.dataclass(eq=False)
class Function(KiteObject):
    type_name: ClassVar[str] = "FUNCTION"
    parameters: tuple[Identifier, ...]
    body: BlockStatement
    env: Environment = dataclasses.field(repr=False)

    def inspect(self) -> str:
        params = ", ".join(p.name for p in self.parameters)
        return f"fn({params}) {self.body.canonical_form()}"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool(value: bool) -> Boolean:
    return TRUE if value else FALSE


class Environment:
    """A scope of name bindings, optionally nested inside an outer scope."""

    def __init__(self, outer: Environment | None = None) -> None:
        self.store: dict[str, KiteObject] = {}
        self.outer = outer

    def get(self, name: str) -> KiteObject | None:
        if name in self.store:
            return self.store[name]
        if self.outer is not None:
            return self.outer.get(name)
        return None

    def set(self, name: str, value: KiteObject) -> KiteObject:
        self.store[name] = value
        return value

    def enclosed(self) -> Environment:
        """Return a fresh scope whose lookups fall back to this one."""
        return Environment(outer=self)
