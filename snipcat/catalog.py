from .types import Catalog, NotFound, SnippetEntry


def lookup_by_prefix(catalog: Catalog, prefix: str) -> SnippetEntry:
    """
    Shared prefixes resolve to the earliest entry in catalog order
    """

    if entry := catalog.prefixes.get(prefix.strip()):
        return entry
    else:
        raise NotFound(prefix)


def lookup_by_name(catalog: Catalog, name: str) -> SnippetEntry:
    if entry := catalog.names.get(name):
        return entry
    else:
        raise NotFound(name)
