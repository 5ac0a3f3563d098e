from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from .parsers.types import Node


class ValidationError(Exception):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(name, reason)
        self.name, self.reason = name, reason

    def __str__(self) -> str:
        return f"{self.name} :: {self.reason}"


class LoadError(ValidationError): ...


class RenderError(Exception):
    def __init__(self, name: str, reason: str) -> None:
        super().__init__(name, reason)
        self.name, self.reason = name, reason

    def __str__(self) -> str:
        return f"{self.name} :: {self.reason}"


class NotFound(KeyError): ...


@dataclass(frozen=True)
class SnippetEntry:
    name: str
    prefix: str
    body: Sequence[str]
    description: str
    tree: Sequence[Node]


@dataclass(frozen=True)
class Catalog:
    entries: Sequence[SnippetEntry]
    names: Mapping[str, SnippetEntry]
    prefixes: Mapping[str, SnippetEntry]
    errors: Sequence[ValidationError]


EMPTY_CATALOG = Catalog(
    entries=(), names=MappingProxyType({}), prefixes=MappingProxyType({}), errors=()
)
