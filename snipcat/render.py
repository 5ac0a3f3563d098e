from re import IGNORECASE, Match, findall
from typing import (
    Iterable,
    Mapping,
    MutableMapping,
    MutableSequence,
    Optional,
)

from std2.types import never

from .parsers.tree import alternatives, definitions
from .parsers.types import (
    Choice,
    Format,
    FormatItem,
    Node,
    Placeholder,
    Regex,
    TabStop,
    Text,
    Transform,
    Variable,
)
from .types import RenderError, SnippetEntry


def _words(text: str) -> Iterable[str]:
    return findall(r"[a-z0-9]+", text, flags=IGNORECASE)


def _case(case: str, text: str) -> str:
    if case == "upcase":
        return text.upper()
    elif case == "downcase":
        return text.lower()
    elif case == "capitalize":
        return text[:1].upper() + text[1:]
    elif case == "pascalcase":
        return "".join(word[:1].upper() + word[1:] for word in _words(text))
    elif case == "camelcase":
        return "".join(
            word[:1].lower() + word[1:] if i == 0 else word[:1].upper() + word[1:]
            for i, word in enumerate(_words(text))
        )
    else:
        return text


def _format(match: "Match[str]", item: FormatItem) -> str:
    if isinstance(item, str):
        return item
    elif isinstance(item, Format):
        try:
            val = match.group(item.group) or ""
        except IndexError:
            val = ""

        if item.case is not None:
            return _case(item.case, text=val)
        elif item.if_text is not None:
            return item.if_text if val else (item.else_text or "")
        elif item.else_text is not None:
            return val or item.else_text
        else:
            return val
    else:
        never(item)


def apply_regex(regex: Regex, text: str) -> str:
    def repl(match: "Match[str]") -> str:
        return "".join(_format(match, item=item) for item in regex.fmt)

    return regex.pattern.sub(repl, text, count=0 if regex.glob else 1)


def render(
    entry: SnippetEntry,
    values: Mapping[int, str],
    variables: Optional[Mapping[str, str]] = None,
) -> str:
    defs = definitions(entry.tree)
    choices = alternatives(entry.tree)
    env = variables or {}

    resolved: MutableMapping[int, str] = {}
    stack: MutableSequence[int] = []

    def resolve(idx: int) -> str:
        if idx in resolved:
            return resolved[idx]
        elif idx in stack:
            cycle = " -> ".join(f"${i}" for i in (*stack, idx))
            raise RenderError(name=entry.name, reason=f"recursive tab stop {cycle}")

        if idx in values:
            val = values[idx]
        else:
            stack.append(idx)
            defn = defs.get(idx)
            if isinstance(defn, Placeholder):
                val = cont(defn.children)
            elif isinstance(defn, Choice):
                val = next(iter(defn.choices), "")
            else:
                val = ""
            stack.pop()

        for alts in choices.get(idx, ()):
            if val not in alts:
                opts = ", ".join(alts)
                raise RenderError(
                    name=entry.name,
                    reason=f"${idx} := {val!r} is not one of ({opts})",
                )

        resolved[idx] = val
        return val

    def one(node: Node) -> str:
        if isinstance(node, Text):
            return node.text
        elif isinstance(node, (TabStop, Placeholder, Choice)):
            return resolve(node.idx)
        elif isinstance(node, Transform):
            return apply_regex(node.regex, text=resolve(node.idx))
        elif isinstance(node, Variable):
            if node.name in env:
                val = env[node.name]
            elif node.children is not None:
                val = cont(node.children)
            else:
                val = node.name
            return apply_regex(node.regex, text=val) if node.regex else val
        else:
            never(node)

    def cont(nodes: Iterable[Node]) -> str:
        return "".join(map(one, nodes))

    return cont(entry.tree)
