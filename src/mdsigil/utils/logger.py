"""Logger access for mdsigil modules.

Every module logs through ``get_logger(__name__)``, so all records sit under
the ``mdsigil`` logger. Handlers and levels are left to the application:

    >>> import logging
    >>> logging.getLogger("mdsigil").setLevel(logging.DEBUG)
"""

from __future__ import annotations

import logging

ROOT = "mdsigil"


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, placed under the ``mdsigil`` namespace.

    Names already inside the namespace are used as they are:

        >>> get_logger("mdsigil.resolver").name
        'mdsigil.resolver'
        >>> get_logger("plugins.extra").name
        'mdsigil.plugins.extra'
    """
    if name != ROOT and not name.startswith(f"{ROOT}."):
        name = f"{ROOT}.{name}"
    return logging.getLogger(name)
