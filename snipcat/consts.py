from os import environ
from pathlib import Path

TOP_LEVEL = Path(__file__).resolve().parent

_CONF_DIR = TOP_LEVEL / "config"
_ART_DIR = TOP_LEVEL / "artifacts"

CONFIG_YML = _CONF_DIR / "defaults.yml"
BUNDLED_SNIPPETS = _ART_DIR / "python.json"

SNIP_LINE_SEP = "\n"

DEBUG = "SNIPCAT_DEBUG" in environ
