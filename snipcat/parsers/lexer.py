from string import Template
from textwrap import dedent
from typing import Iterable, Iterator, MutableSequence, NoReturn, Sequence

from std2.itertools import deiter

from ..consts import SNIP_LINE_SEP
from .types import EChar, Index, Node, ParseError, ParserCtx, Text, Token

EOF = Index(i=-1, row=-1, col=-1)


def raise_err(
    text: str, pos: Index, condition: str, expected: Iterable[str], actual: str
) -> NoReturn:
    band = 8
    found = repr(actual) if actual else "end of body"
    wanted = " | ".join(expected) or "-"
    if pos == EOF:
        where, near = "end of body", text[-band:]
    else:
        where = f"line {pos.row}, column {pos.col}"
        near = text[max(0, pos.i - band) : pos.i + band + 1]

    tpl = """
    Bad placeholder syntax, ${condition}
      at:       ${where}
      expected: ${wanted}
      found:    ${found}
      near:     ${near}
    """
    msg = Template(dedent(tpl)).substitute(
        condition=condition, where=where, wanted=wanted, found=found, near=repr(near)
    )
    raise ParseError(msg.strip())


def next_char(it: Iterator[EChar]) -> EChar:
    return next(it, (EOF, ""))


def pushback_chars(context: ParserCtx, *vals: EChar) -> None:
    for pos, char in reversed(vals):
        if char:
            context.dit.push_back((pos, char))


def _gen_iter(src: str) -> Iterator[EChar]:
    row, col = 1, 1
    for i, c in enumerate(src):
        yield Index(i=i, row=row, col=col), c
        col += 1
        if c == SNIP_LINE_SEP:
            row += 1
            col = 1


def context_from(snippet: str) -> ParserCtx:
    dit = deiter(_gen_iter(snippet))
    return ParserCtx(text=snippet, dit=dit)


def token_parser(stream: Iterable[Token]) -> Sequence[Node]:
    def cont() -> Iterator[Node]:
        slices: MutableSequence[str] = []
        for token in stream:
            if isinstance(token, str):
                slices.append(token)
            else:
                if slices:
                    yield Text(text="".join(slices))
                    slices.clear()
                yield token

        if slices:
            yield Text(text="".join(slices))

    return tuple(cont())
