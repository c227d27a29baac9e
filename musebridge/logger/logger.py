import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console(
    width=100,
    highlight=False,
    markup=True,
    soft_wrap=True,
)

logging.basicConfig(
    level=os.getenv("MUSEBRIDGE_LOG_LEVEL", "INFO").upper(),
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            markup=False,
        )
    ],
    force=True,
)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
