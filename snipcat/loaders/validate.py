from typing import Any, Mapping, Sequence, Union

from std2.pickle import new_decoder
from std2.pickle.types import DecodeError

from ..consts import SNIP_LINE_SEP
from ..parsers.lsp import tokenizer
from ..parsers.tree import alternatives, definitions, find_cycle, mixed, references
from ..parsers.types import Node, ParseError
from ..types import SnippetEntry, ValidationError
from .types import RawSnippet

_REQUIRED = ("prefix", "body", "description")
# `$0` is the final cursor position, it never needs a default
_FINAL_STOP = 0

_DECODER = new_decoder(RawSnippet, strict=False)


def _lines(body: Union[str, Sequence[str]]) -> Sequence[str]:
    if isinstance(body, str):
        return tuple(body.split(SNIP_LINE_SEP))
    elif isinstance(body, Sequence):
        return tuple(body)
    else:
        assert False


def _doc(description: Union[str, Sequence[str]]) -> str:
    if isinstance(description, str):
        return description
    elif isinstance(description, Sequence):
        return SNIP_LINE_SEP.join(description)
    else:
        assert False


def _decode(name: str, record: Any) -> RawSnippet:
    if not isinstance(record, Mapping):
        raise ValidationError(name=name, reason="snippet must be an object")
    elif missing := tuple(key for key in _REQUIRED if key not in record):
        raise ValidationError(
            name=name, reason=f"missing required field(s) :: {', '.join(missing)}"
        )
    else:
        try:
            return _DECODER(record)
        except DecodeError as e:
            raise ValidationError(name=name, reason=f"malformed snippet -- {e}") from e


def check_tree(name: str, tree: Sequence[Node]) -> None:
    defined = definitions(tree).keys()
    if dangling := sorted(references(tree) - defined - {_FINAL_STOP}):
        stops = ", ".join(f"${idx}" for idx in dangling)
        raise ValidationError(
            name=name, reason=f"mirror of undefined tab stop :: {stops}"
        )
    elif both := sorted(mixed(tree)):
        stops = ", ".join(f"${idx}" for idx in both)
        raise ValidationError(
            name=name, reason=f"tab stop is both a placeholder and a choice :: {stops}"
        )
    elif cycle := find_cycle(tree):
        stops = " -> ".join(f"${idx}" for idx in cycle)
        raise ValidationError(name=name, reason=f"recursive tab stop :: {stops}")

    for idx, (head, *rest) in alternatives(tree).items():
        default = next(iter(head), "")
        for alts in rest:
            if default not in alts:
                opts = ", ".join(alts)
                raise ValidationError(
                    name=name,
                    reason=f"default of ${idx} {default!r} is not one of ({opts})",
                )


def new_entry(
    name: str,
    prefix: str,
    body: Union[str, Sequence[str]],
    description: Union[str, Sequence[str]],
) -> SnippetEntry:
    lines = _lines(body)
    prefix = prefix.strip()
    content = SNIP_LINE_SEP.join(lines)

    if not prefix:
        raise ValidationError(name=name, reason="empty prefix")
    elif not content.strip():
        raise ValidationError(name=name, reason="empty body")

    try:
        tree = tokenizer(content)
    except ParseError as e:
        raise ValidationError(name=name, reason=str(e)) from e

    check_tree(name, tree=tree)
    return SnippetEntry(
        name=name,
        prefix=prefix,
        body=lines,
        description=_doc(description),
        tree=tree,
    )


def entry_from(name: str, record: Any) -> SnippetEntry:
    raw = _decode(name, record=record)
    return new_entry(
        name,
        prefix=raw.prefix,
        body=raw.body,
        description=raw.description,
    )
