# Copyright (c) Rich Connexions Ltd. All rights reserved.
# Licensed under the MIT License. See LICENSE for details.
"""Logging setup for the ida CLI.

Diagnostics go to stderr so that stdout carries only the JSON result.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ida.config import LOG_FORMAT, LOG_LEVEL


class _JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Fields are ``timestamp`` (ISO 8601, UTC, microseconds), ``level``,
    ``logger`` and ``message``; ``exception`` is added when the record
    carries a traceback.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure the root logger for a CLI run.

    *level* and *fmt* override ``IDA_LOG_LEVEL`` and ``IDA_LOG_FORMAT``.
    Existing root handlers are removed first so repeated invocations (as
    under a test runner) do not duplicate output.
    """
    root = logging.getLogger()

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if (fmt or LOG_FORMAT).lower() == "json":
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root.addHandler(handler)
    root.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))
