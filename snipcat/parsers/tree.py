from typing import (
    AbstractSet,
    Iterable,
    Iterator,
    Mapping,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Sequence,
)

from .types import Choice, Definition, Node, Placeholder, TabStop, Transform, Variable


def walk(nodes: Iterable[Node]) -> Iterator[Node]:
    for node in nodes:
        yield node
        if isinstance(node, Placeholder):
            yield from walk(node.children)
        elif isinstance(node, Variable) and node.children is not None:
            yield from walk(node.children)


def definitions(nodes: Iterable[Node]) -> Mapping[int, Definition]:
    """
    First defining occurrence of each tab stop, in document order
    """

    acc: MutableMapping[int, Definition] = {}
    for node in walk(nodes):
        if isinstance(node, (Placeholder, Choice)):
            acc.setdefault(node.idx, node)
    return acc


def references(nodes: Iterable[Node]) -> AbstractSet[int]:
    return {node.idx for node in walk(nodes) if isinstance(node, (TabStop, Transform))}


def alternatives(nodes: Iterable[Node]) -> Mapping[int, Sequence[Sequence[str]]]:
    acc: MutableMapping[int, MutableSequence[Sequence[str]]] = {}
    for node in walk(nodes):
        if isinstance(node, Choice):
            acc.setdefault(node.idx, []).append(node.choices)
    return acc


def mixed(nodes: Iterable[Node]) -> AbstractSet[int]:
    """
    Tab stops given both a free text default and a closed set of choices
    """

    placeholders = {node.idx for node in walk(nodes) if isinstance(node, Placeholder)}
    return placeholders & alternatives(nodes).keys()


def _rendered(
    nodes: Iterable[Node], defs: Mapping[int, Definition]
) -> Iterator[Node]:
    # repeat definitions render as mirrors, their defaults are never visited
    for node in nodes:
        yield node
        if isinstance(node, Placeholder) and defs.get(node.idx) is node:
            yield from _rendered(node.children, defs=defs)
        elif isinstance(node, Variable) and node.children is not None:
            yield from _rendered(node.children, defs=defs)


def _indices(
    nodes: Iterable[Node], defs: Mapping[int, Definition]
) -> AbstractSet[int]:
    return {
        node.idx
        for node in _rendered(nodes, defs=defs)
        if isinstance(node, (TabStop, Placeholder, Choice, Transform))
    }


def find_cycle(nodes: Iterable[Node]) -> Sequence[int]:
    """
    A default that (transitively) renders its own tab stop can never resolve
    """

    defs = definitions(nodes)
    deps = {
        idx: _indices(defn.children, defs=defs)
        if isinstance(defn, Placeholder)
        else set()
        for idx, defn in defs.items()
    }
    done: MutableSet[int] = set()
    path: MutableSequence[int] = []

    def visit(idx: int) -> Sequence[int]:
        if idx in path:
            return (*path[path.index(idx) :], idx)
        elif idx in done:
            return ()
        else:
            path.append(idx)
            for dep in sorted(deps.get(idx, ())):
                if cycle := visit(dep):
                    return cycle
            path.pop()
            done.add(idx)
            return ()

    for idx in sorted(deps):
        if cycle := visit(idx):
            return cycle
    return ()
