"""Terminal log setup.

Every area logs through a named stdlib logger (``burrow.scan``,
``burrow.compile``, ``burrow.emit``, ``burrow.watch``).  Library code
never configures handlers; the CLI calls :func:`configure_logging` once.
"""

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"


def configure_logging(*, verbose: bool = False) -> None:
    """Install a stderr handler on the ``burrow`` logger.

    Safe to call more than once; only one handler is ever attached.
    """
    logger = logging.getLogger("burrow")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if any(getattr(h, "_burrow", False) for h in logger.handlers):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, _DATE_FORMAT))
    handler._burrow = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
