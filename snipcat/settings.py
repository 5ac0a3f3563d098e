from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Mapping, Optional

from std2.pickle import new_decoder
from std2.tree import merge
from yaml import safe_load

from .consts import CONFIG_YML


class OnError(Enum):
    abort = auto()
    skip = auto()


class DuplicatePrefix(Enum):
    first = auto()
    reject = auto()


@dataclass(frozen=True)
class Settings:
    on_error: OnError
    duplicate_prefix: DuplicatePrefix


_DECODER = new_decoder(Settings)


def load_settings(user_config: Optional[Mapping[str, Any]] = None) -> Settings:
    defaults = safe_load(CONFIG_YML.read_text("UTF-8"))
    config = merge(defaults, user_config or {}, replace=True)
    return _DECODER(config)
