"""
GITHOOKS - Logging
Configuração do logging de diagnóstico (stderr, via rich).
"""

import logging
import os
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: Optional[bool] = None) -> None:
    """
    Configura o logger raiz do pacote.

    Args:
        verbose: Força nível DEBUG. Se None, usa a variável GITHOOKS_DEBUG.
    """
    if verbose is None:
        verbose = bool(os.environ.get("GITHOOKS_DEBUG"))

    logger = logging.getLogger("githooks")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            show_time=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)

    logger.propagate = False
