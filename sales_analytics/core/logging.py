from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    # Scripts that print JSON to stdout pass stderr here.
    log_level = (level or "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[logging.StreamHandler(stream or sys.stdout)],
    )
