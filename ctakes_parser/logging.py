"""Logging for batch runs.

`PprintLogger` wraps a standard logger so that records, diagnostics and
other structured values can be passed straight to the logging calls. The
batch log is read line by line, so a `Diagnostic` is written through its
one-line `describe()` and other models as compact JSON.
"""

import inspect
import logging
from pathlib import Path
from pprint import pformat
from typing import Any

from pydantic import BaseModel

from ctakes_parser.records import Diagnostic

CONSOLE_FORMAT = "%(asctime)s - %(pathname)s:%(lineno)d - %(levelname)s - %(message)s"
BATCH_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def _describe(value: Any) -> str:
    if isinstance(value, Diagnostic):
        return value.describe()
    if isinstance(value, BaseModel):
        return value.model_dump_json(exclude_none=True)
    return pformat(value, width=120)


class PprintLogger:
    """A logger wrapper that formats structured values before logging them.

    Strings are logged as they are. A list or tuple of models is logged one
    model per line, so a file's diagnostics can be logged with one call.
    Pass `pprint=False` to log `str(msg)` instead.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def _format_message(self, msg: Any, pprint: bool = True) -> str:
        if not pprint or isinstance(msg, str):
            return str(msg)
        if isinstance(msg, (list, tuple)) and msg and all(isinstance(m, BaseModel) for m in msg):
            return "\n".join(_describe(m) for m in msg)
        return _describe(msg)

    def log(self, level: int, msg: Any, *args, pprint: bool = True, **kwargs) -> None:
        kwargs.setdefault("stacklevel", 2)
        self._logger.log(level, self._format_message(msg, pprint=pprint), *args, **kwargs)

    def debug(self, msg: Any, *args, **kwargs) -> None:
        self.log(logging.DEBUG, msg, *args, stacklevel=3, **kwargs)

    def info(self, msg: Any, *args, **kwargs) -> None:
        self.log(logging.INFO, msg, *args, stacklevel=3, **kwargs)

    def warning(self, msg: Any, *args, **kwargs) -> None:
        self.log(logging.WARNING, msg, *args, stacklevel=3, **kwargs)

    def error(self, msg: Any, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, stacklevel=3, **kwargs)

    def exception(self, msg: Any, *args, **kwargs) -> None:
        self.log(logging.ERROR, msg, *args, exc_info=True, stacklevel=3, **kwargs)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._logger, name)


def setup_logging(level: int = logging.INFO) -> PprintLogger:
    """Set up console logging and return a PprintLogger named after the caller."""
    frame = inspect.currentframe().f_back  # type: ignore[union-attr]
    logger_name = frame.f_code.co_name  # type: ignore[union-attr]
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(handler)
    return PprintLogger(logger)


class BatchLog:
    """The log file of one batch run.

    Each instance owns a private logger and file handler. The logger is
    created outside the `logging` manager, so nothing is left registered
    once the run ends. The file is truncated on `open()` and released on
    `close()`; use it as a context manager so a failing batch still closes
    the file.

    Example:
        ```python
        with BatchLog(output_dir / "logfile.log") as log:
            log.info("Parsing 3 files")
        ```
    """

    def __init__(self, path: str | Path, level: int = logging.INFO):
        self.path = Path(path)
        self.level = level
        self._logger: logging.Logger | None = None
        self._handler: logging.FileHandler | None = None

    @property
    def is_open(self) -> bool:
        return self._handler is not None

    def open(self) -> PprintLogger:
        if self._logger is not None:
            raise RuntimeError(f"Batch log already open: {self.path}")
        logger = logging.Logger(f"ctakes_parser.batch.{self.path.stem}")
        logger.setLevel(self.level)
        logger.propagate = False
        handler = logging.FileHandler(self.path, mode="w", encoding="utf-8")
        handler.setLevel(self.level)
        handler.setFormatter(logging.Formatter(BATCH_FORMAT))
        logger.addHandler(handler)
        self._logger = logger
        self._handler = handler
        return PprintLogger(logger)

    def close(self) -> None:
        if self._logger is None or self._handler is None:
            return
        self._logger.removeHandler(self._handler)
        self._handler.close()
        self._handler = None
        self._logger = None

    def __enter__(self) -> PprintLogger:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()
