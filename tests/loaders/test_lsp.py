from json import dumps
from typing import Any, Mapping
from unittest import TestCase

from snipcat.catalog import lookup_by_prefix
from snipcat.consts import BUNDLED_SNIPPETS
from snipcat.loaders.lsp import load, load_path
from snipcat.logging import log
from snipcat.render import render
from snipcat.settings import load_settings
from snipcat.types import LoadError, ValidationError

_ABORT = load_settings()
_SKIP = load_settings({"on_error": "skip"})
_REJECT = load_settings({"duplicate_prefix": "reject"})


def _snip(prefix: str, *body: str, description: str = "") -> Mapping[str, Any]:
    return {"prefix": prefix, "body": list(body), "description": description}


class Bundled(TestCase):
    def test_1(self) -> None:
        catalog = load_path(BUNDLED_SNIPPETS, settings=_ABORT)
        self.assertEqual(catalog.errors, ())
        self.assertEqual(len(catalog.entries), 11)

        for entry in catalog.entries:
            with self.subTest(name=entry.name):
                self.assertIs(lookup_by_prefix(catalog, prefix=entry.prefix), entry)
                self.assertEqual(render(entry, values={}), render(entry, values={}))

    def test_2(self) -> None:
        catalog = load_path(BUNDLED_SNIPPETS, settings=_ABORT)
        entry = lookup_by_prefix(catalog, prefix="ud-flask")
        text = render(entry, values={1: "gemini"})
        self.assertIn('provider="gemini"', text)
        self.assertIn('os.environ.get("GEMINI_API_KEY")', text)


class Load(TestCase):
    def test_1(self) -> None:
        source = dumps(
            {
                "First": _snip("a", "${1:x}"),
                "Second": _snip("b", "y", description="why"),
            }
        )
        catalog = load(source, settings=_ABORT)
        self.assertEqual(tuple(e.name for e in catalog.entries), ("First", "Second"))
        self.assertEqual(catalog.names["Second"].description, "why")

    def test_2(self) -> None:
        source = """
        {
          "Same": {"prefix": "a", "body": ["x"], "description": ""},
          "Same": {"prefix": "b", "body": ["y"], "description": ""}
        }
        """
        with self.assertRaises(ValidationError) as ctx:
            load(source, settings=_ABORT)
        self.assertEqual(ctx.exception.name, "Same")
        self.assertIn("duplicate name", ctx.exception.reason)

    def test_3(self) -> None:
        source = dumps({"Dangling": _snip("d", "${1:x} $2")})
        with self.assertRaises(ValidationError) as ctx:
            load(source, settings=_ABORT)
        self.assertEqual(ctx.exception.name, "Dangling")
        self.assertIn("$2", ctx.exception.reason)

    def test_4(self) -> None:
        source = dumps({"Transform": _snip("t", "${1/a/b/}")})
        with self.assertRaises(ValidationError):
            load(source, settings=_ABORT)

    def test_5(self) -> None:
        source = dumps({"Missing": {"prefix": "m", "body": ["x"]}})
        with self.assertRaises(ValidationError) as ctx:
            load(source, settings=_ABORT)
        self.assertIn("description", ctx.exception.reason)

    def test_6(self) -> None:
        for record in (
            _snip("e"),
            _snip("e", "", "  "),
            _snip("  ", "x"),
            {"prefix": ["a", "b"], "body": ["x"], "description": ""},
            "not a snippet",
            _snip("e", "${1:x"),
            _snip("e", "${1:${2}} ${2:${1}}"),
        ):
            with self.subTest(record=record):
                with self.assertRaises(ValidationError):
                    load(dumps({"Bad": record}), settings=_ABORT)

    def test_7(self) -> None:
        with self.assertRaises(LoadError):
            load("{", settings=_ABORT)
        with self.assertRaises(LoadError):
            load("[]", settings=_ABORT)
        with self.assertRaises(ValidationError):
            load_path(BUNDLED_SNIPPETS.with_name("missing.json"), settings=_ABORT)

    def test_8(self) -> None:
        source = dumps(
            {
                "String": {
                    "prefix": " s ",
                    "body": "a\n${1:b}",
                    "description": ["line 1", "line 2"],
                    "scope": "python",
                }
            }
        )
        catalog = load(source, settings=_ABORT)
        (entry,) = catalog.entries
        self.assertEqual(entry.prefix, "s")
        self.assertEqual(entry.body, ("a", "${1:b}"))
        self.assertEqual(entry.description, "line 1\nline 2")

    def test_9(self) -> None:
        source = dumps({"Mixed": _snip("m", "${1:x} ${1|a,b|}")})
        with self.assertRaises(ValidationError) as ctx:
            load(source, settings=_ABORT)
        self.assertEqual(ctx.exception.name, "Mixed")
        self.assertIn("both a placeholder and a choice :: $1", ctx.exception.reason)

        source = dumps({"Choices": _snip("c", "${1|a,b|} ${1|b,c|}")})
        with self.assertRaises(ValidationError) as ctx:
            load(source, settings=_ABORT)
        self.assertIn("'a'", ctx.exception.reason)

    def test_10(self) -> None:
        source = dumps({"Repeat": _snip("r", "${1:a} ${2:${1:${2}}}")})
        (entry,) = load(source, settings=_ABORT).entries
        self.assertEqual(render(entry, values={}), "a a")

    def test_11(self) -> None:
        catalog = load(dumps({"One": _snip("o", "x")}), settings=_ABORT)
        with self.assertRaises(TypeError):
            catalog.names["Two"] = catalog.names["One"]  # type: ignore
        with self.assertRaises(TypeError):
            catalog.prefixes["t"] = catalog.names["One"]  # type: ignore

    def test_12(self) -> None:
        with self.assertRaises(LoadError) as ctx:
            load('{\n  "a": [1,,2]\n}', settings=_ABORT)
        self.assertIn("line 2, column", ctx.exception.reason)
        self.assertIn('"a": [1,,2]', ctx.exception.reason)


class Policies(TestCase):
    def test_1(self) -> None:
        source = dumps(
            {
                "Good": _snip("g", "x"),
                "Bad": _snip("b", "$1"),
                "Also Good": _snip("h", "y"),
            }
        )
        with self.assertLogs(log, level="WARNING"):
            catalog = load(source, settings=_SKIP)

        self.assertEqual(tuple(catalog.names), ("Good", "Also Good"))
        (err,) = catalog.errors
        self.assertEqual(err.name, "Bad")

    def test_2(self) -> None:
        source = dumps({"One": _snip("p", "1"), "Two": _snip("p", "2")})
        with self.assertLogs(log, level="WARNING"):
            catalog = load(source, settings=_ABORT)

        self.assertEqual(len(catalog.entries), 2)
        self.assertEqual(lookup_by_prefix(catalog, prefix="p").name, "One")

    def test_3(self) -> None:
        source = dumps({"One": _snip("p", "1"), "Two": _snip("p", "2")})
        with self.assertRaises(ValidationError) as ctx:
            load(source, settings=_REJECT)
        self.assertEqual(ctx.exception.name, "Two")

    def test_4(self) -> None:
        source = """
        {
          "Same": {"prefix": "a", "body": ["x"], "description": ""},
          "Same": {"prefix": "b", "body": ["y"], "description": ""}
        }
        """
        with self.assertLogs(log, level="WARNING"):
            catalog = load(source, settings=_SKIP)
        self.assertEqual(catalog.names["Same"].prefix, "a")
        self.assertEqual(len(catalog.errors), 1)
