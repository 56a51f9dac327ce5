"""Package logging."""
import logging

from brokkr.config import settings

ROOT_NAME = "brokkr"

_root = logging.getLogger(ROOT_NAME)
_root.addHandler(logging.NullHandler())
_root.setLevel(settings.log_level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the ``brokkr`` root, e.g. ``brokkr.matrix``."""
    if name == ROOT_NAME or name.startswith(ROOT_NAME + "."):
        return logging.getLogger(name)

    return _root.getChild(name)
