from pathlib import PurePath
from typing import Optional

from std2.cell import RefCell

from .consts import BUNDLED_SNIPPETS
from .loaders.lsp import load_path
from .logging import log
from .settings import Settings
from .types import EMPTY_CATALOG, Catalog

_CELL = RefCell(EMPTY_CATALOG)


def current() -> Catalog:
    if (catalog := _CELL.val) is EMPTY_CATALOG:
        return reload()
    else:
        return catalog


def reload(
    path: PurePath = BUNDLED_SNIPPETS, settings: Optional[Settings] = None
) -> Catalog:
    catalog = load_path(path, settings=settings)
    _CELL.val = catalog
    log.info("%s", f"{path} :: {len(catalog.entries)} snippets")
    return catalog
