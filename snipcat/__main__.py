from argparse import ArgumentParser, ArgumentTypeError, Namespace
from contextlib import nullcontext
from dataclasses import replace
from pathlib import Path
from sys import exit, stderr
from typing import Optional, Sequence, Tuple

from yaml import safe_load

from .catalog import lookup_by_prefix
from .consts import BUNDLED_SNIPPETS
from .loaders.lsp import load_path
from .render import render
from .settings import OnError, Settings, load_settings
from .types import NotFound, RenderError, ValidationError


def _idx_value(arg: str) -> Tuple[int, str]:
    lhs, sep, rhs = arg.partition("=")
    if not sep or not lhs.isdigit():
        raise ArgumentTypeError(f"expected INDEX=VALUE, got {arg!r}")
    else:
        return int(lhs), rhs


def _var_value(arg: str) -> Tuple[str, str]:
    lhs, sep, rhs = arg.partition("=")
    if not sep or not lhs:
        raise ArgumentTypeError(f"expected NAME=VALUE, got {arg!r}")
    else:
        return lhs, rhs


def _parse_args(argv: Optional[Sequence[str]]) -> Namespace:
    parser = ArgumentParser(prog="snipcat")
    parser.add_argument("--config", type=Path)

    sub_parsers = parser.add_subparsers(dest="command", required=True)

    with nullcontext(sub_parsers.add_parser("check")) as p:
        p.add_argument("paths", nargs="+", type=Path)

    with nullcontext(sub_parsers.add_parser("list")) as p:
        p.add_argument("path", nargs="?", type=Path, default=BUNDLED_SNIPPETS)

    with nullcontext(sub_parsers.add_parser("render")) as p:
        p.add_argument("prefix")
        p.add_argument("-f", "--file", type=Path, default=BUNDLED_SNIPPETS)
        p.add_argument("-v", "--value", type=_idx_value, action="append", default=[])
        p.add_argument("-V", "--var", type=_var_value, action="append", default=[])

    return parser.parse_args(argv)


def _settings(config: Optional[Path]) -> Settings:
    user_config = safe_load(config.read_text("UTF-8")) if config else None
    return load_settings(user_config)


def _check(settings: Settings, paths: Sequence[Path]) -> int:
    settings = replace(settings, on_error=OnError.skip)
    failed = False
    for path in paths:
        try:
            catalog = load_path(path, settings=settings)
        except ValidationError as e:
            failed = True
            print(e, file=stderr)
        else:
            failed |= bool(catalog.errors)
            for err in catalog.errors:
                print(f"{path} :: {err}", file=stderr)
            print(f"{path} :: {len(catalog.entries)} ok, {len(catalog.errors)} failed")

    return failed


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        settings = _settings(args.config)

        if args.command == "check":
            return _check(settings, paths=args.paths)

        elif args.command == "list":
            catalog = load_path(args.path, settings=settings)
            for entry in catalog.entries:
                print(entry.prefix, entry.name, entry.description, sep="\t")
            return 0

        elif args.command == "render":
            catalog = load_path(args.file, settings=settings)
            entry = lookup_by_prefix(catalog, prefix=args.prefix)
            print(render(entry, values=dict(args.value), variables=dict(args.var)))
            return 0

        else:
            assert False, args.command

    except (ValidationError, RenderError) as e:
        print(e, file=stderr)
        return 1
    except NotFound as e:
        print(f"no snippet for {e}", file=stderr)
        return 1


if __name__ == "__main__":
    exit(main())
