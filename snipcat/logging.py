from logging import DEBUG as DEBUG_LV
from logging import INFO, Formatter, StreamHandler, getLogger

from .consts import DEBUG

_FMT = "%(asctime)s [%(levelname)s] %(name)s :: %(message)s"
_DATE_FMT = "%H:%M:%S"

log = getLogger("snipcat")

_handler = StreamHandler()
_handler.setFormatter(Formatter(fmt=_FMT, datefmt=_DATE_FMT))
log.addHandler(_handler)
log.setLevel(DEBUG_LV if DEBUG else INFO)
