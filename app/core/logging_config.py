"""
Logging setup shared by the CLI scripts: console plus an optional rotating file.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from app.core.config import Settings, settings as default_settings


def configure_logging(settings: Optional[Settings] = None, level: Optional[str] = None) -> None:
    s = settings or default_settings
    handlers = [logging.StreamHandler()]
    if s.log_file:
        Path(s.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                s.log_file,
                maxBytes=s.log_file_max_bytes,
                backupCount=s.log_file_backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, (level or s.log_level).upper()),
        format=s.log_format,
        datefmt=s.log_date_format,
        handlers=handlers,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
