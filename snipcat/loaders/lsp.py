from json import loads
from json.decoder import JSONDecodeError
from pathlib import Path, PurePath
from types import MappingProxyType
from typing import (
    Any,
    MutableMapping,
    MutableSequence,
    MutableSet,
    Optional,
    Sequence,
    Tuple,
)

from ..logging import log
from ..settings import DuplicatePrefix, OnError, Settings, load_settings
from ..types import Catalog, LoadError, SnippetEntry, ValidationError
from .parse import raise_err
from .types import JSONObject
from .validate import entry_from

_SOURCE = PurePath("<string>")


def _hook(pairs: Sequence[Tuple[str, Any]]) -> JSONObject:
    return JSONObject(pairs=tuple(pairs))


def _record(value: Any) -> Any:
    return dict(value.pairs) if isinstance(value, JSONObject) else value


def _line(text: str, lineno: int) -> str:
    lines = text.splitlines()
    return lines[lineno - 1] if 0 < lineno <= len(lines) else ""


def load(
    source: str, settings: Optional[Settings] = None, path: PurePath = _SOURCE
) -> Catalog:
    settings = settings or load_settings()

    try:
        json = loads(source, object_pairs_hook=_hook)
    except JSONDecodeError as e:
        raise_err(
            path,
            lineno=e.lineno,
            colno=e.colno,
            line=_line(source, e.lineno),
            reason=e.msg,
        )

    if not isinstance(json, JSONObject):
        raise_err(
            path,
            lineno=1,
            colno=1,
            line=_line(source, 1),
            reason="expected an object of {name: snippet}",
        )

    seen: MutableSet[str] = set()
    entries: MutableSequence[SnippetEntry] = []
    names: MutableMapping[str, SnippetEntry] = {}
    prefixes: MutableMapping[str, SnippetEntry] = {}
    errors: MutableSequence[ValidationError] = []

    for name, value in json.pairs:
        try:
            if name in seen:
                raise ValidationError(name=name, reason="duplicate name")
            seen.add(name)

            entry = entry_from(name, record=_record(value))
            if first := prefixes.get(entry.prefix):
                reason = (
                    f"duplicate prefix {entry.prefix!r}, already used by {first.name!r}"
                )
                if settings.duplicate_prefix is DuplicatePrefix.reject:
                    raise ValidationError(name=name, reason=reason)
                else:
                    log.warning("%s", f"{path} :: {name} :: {reason}")

        except ValidationError as e:
            if settings.on_error is OnError.abort:
                raise
            else:
                log.warning("%s", f"{path} :: skipped {e}")
                errors.append(e)

        else:
            entries.append(entry)
            names[entry.name] = entry
            prefixes.setdefault(entry.prefix, entry)

    catalog = Catalog(
        entries=tuple(entries),
        names=MappingProxyType(names),
        prefixes=MappingProxyType(prefixes),
        errors=tuple(errors),
    )
    log.debug("%s", f"{path} :: loaded {len(entries)}, skipped {len(errors)}")
    return catalog


def load_path(path: PurePath, settings: Optional[Settings] = None) -> Catalog:
    try:
        text = Path(path).read_text("UTF-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(name=str(path), reason=str(e)) from e
    else:
        return load(text, settings=settings, path=path)
