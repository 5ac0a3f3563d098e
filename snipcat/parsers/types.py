from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Pattern, Sequence, Tuple, Union

from std2.itertools import deiter


class ParseError(Exception): ...


@dataclass(frozen=True)
class Index:
    i: int
    row: int
    col: int


EChar = Tuple[Index, str]


@dataclass(frozen=True)
class ParserCtx(Iterator):
    text: str
    dit: deiter[EChar]

    def __iter__(self) -> ParserCtx:
        return self

    def __next__(self) -> EChar:
        return next(self.dit)


@dataclass(frozen=True)
class Text:
    text: str


# '$' int | '${' int '}'
@dataclass(frozen=True)
class TabStop:
    idx: int


# '${' int ':' any '}'
@dataclass(frozen=True)
class Placeholder:
    idx: int
    children: Sequence[Node]


# '${' int '|' text (',' text)* '|}'
@dataclass(frozen=True)
class Choice:
    idx: int
    choices: Sequence[str]


@dataclass(frozen=True)
class Format:
    group: int
    case: Optional[str]
    if_text: Optional[str]
    else_text: Optional[str]


FormatItem = Union[str, Format]


@dataclass(frozen=True)
class Regex:
    pattern: Pattern[str]
    fmt: Sequence[FormatItem]
    glob: bool


# '${' int '/' regex '/' (format | text)* '/' options '}'
@dataclass(frozen=True)
class Transform:
    idx: int
    regex: Regex


@dataclass(frozen=True)
class Variable:
    name: str
    children: Optional[Sequence[Node]]
    regex: Optional[Regex]


Node = Union[Text, TabStop, Placeholder, Choice, Transform, Variable]
Definition = Union[Placeholder, Choice]
Token = Union[Node, str]
TokenStream = Iterator[Token]
