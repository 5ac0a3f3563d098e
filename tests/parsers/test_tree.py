from unittest import TestCase

from snipcat.parsers.lsp import tokenizer
from snipcat.parsers.tree import (
    alternatives,
    definitions,
    find_cycle,
    mixed,
    references,
)
from snipcat.parsers.types import Choice, Placeholder, Text


class Definitions(TestCase):
    def test_1(self) -> None:
        tree = tokenizer("${1:a} ${1:b} ${2|x,y|} $3")
        defs = definitions(tree)
        self.assertEqual(defs.keys(), {1, 2})
        self.assertEqual(defs[1], Placeholder(idx=1, children=(Text(text="a"),)))
        self.assertEqual(defs[2], Choice(idx=2, choices=("x", "y")))

    def test_2(self) -> None:
        tree = tokenizer("${1:outer ${2:inner}} ${2:later}")
        defs = definitions(tree)
        self.assertEqual(defs[2], Placeholder(idx=2, children=(Text(text="inner"),)))

    def test_3(self) -> None:
        tree = tokenizer("${NAME:${1:a}} $1")
        self.assertEqual(definitions(tree).keys(), {1})


class References(TestCase):
    def test_1(self) -> None:
        tree = tokenizer("${1:a} $1 ${2/x/y/} ${3:${4}}")
        self.assertEqual(references(tree), {1, 2, 4})

    def test_2(self) -> None:
        tree = tokenizer("${1|a,b|} ${1|c|} ${2|d|}")
        self.assertEqual(alternatives(tree), {1: [("a", "b"), ("c",)], 2: [("d",)]})

    def test_3(self) -> None:
        self.assertEqual(mixed(tokenizer("${1:x} ${1|a,b|} ${2|c|} ${3:d}")), {1})
        self.assertEqual(mixed(tokenizer("${1|a,b|} ${1|a|}")), set())


class Cycles(TestCase):
    def test_1(self) -> None:
        self.assertEqual(find_cycle(tokenizer("${1:a ${2:b}} $2")), ())

    def test_2(self) -> None:
        self.assertEqual(find_cycle(tokenizer("${1:${1}}")), (1, 1))

    def test_3(self) -> None:
        self.assertEqual(find_cycle(tokenizer("${1:${2}} ${2:${1}}")), (1, 2, 1))

    def test_4(self) -> None:
        tree = tokenizer("${1:x} ${2:${1/x/y/}} ${3:${2}}")
        self.assertEqual(find_cycle(tree), ())

    def test_5(self) -> None:
        tree = tokenizer("${1:a} ${2:${1:${2}}}")
        self.assertEqual(find_cycle(tree), ())

    def test_6(self) -> None:
        tree = tokenizer("${1:a} ${2:${1:b} ${2}}")
        self.assertEqual(find_cycle(tree), (2, 2))
