from pathlib import PurePath
from typing import NoReturn

from ..types import LoadError


def raise_err(
    path: PurePath, lineno: int, colno: int, line: str, reason: str
) -> NoReturn:
    caret = " " * max(0, colno - 1) + "^"
    msg = f"not a snippet catalog, {reason} (line {lineno}, column {colno})"
    if line:
        msg = f"{msg}\n  {line}\n  {caret}"
    raise LoadError(name=str(path), reason=msg)
