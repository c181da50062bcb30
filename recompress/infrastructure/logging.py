import logging
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.logging import RichHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

def setup_logging(log_file: Optional[Path] = None, debug: bool = False) -> logging.Logger:
    """Configures the root logger once per run.

    With a log file everything from INFO (DEBUG with ``debug``) goes to the
    file only, so the console stays readable. Without one, warnings and errors
    go to stderr through rich.
    """
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        level = logging.DEBUG if debug else logging.INFO
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        level = logging.DEBUG if debug else logging.WARNING

    logging.basicConfig(level=level, handlers=[handler], force=True)
    return logging.getLogger("recompress")
