import logging

from notekeep.shared.config import settings

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Install the root handler once; later calls only adjust the level."""
    root = logging.getLogger()
    lvl = (level or settings.LOG_LEVEL).upper()
    if not root.handlers:
        logging.basicConfig(level=lvl, format=_FORMAT)
    else:
        root.setLevel(lvl)
