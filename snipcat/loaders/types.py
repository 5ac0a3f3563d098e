from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union


@dataclass(frozen=True)
class JSONObject:
    pairs: Sequence[Tuple[str, Any]]


@dataclass
class RawSnippet:
    prefix: str
    body: Union[str, Sequence[str]]
    description: Union[str, Sequence[str]]
