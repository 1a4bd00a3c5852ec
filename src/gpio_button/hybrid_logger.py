"""
Per-class logging for the button library (console + optional file)

Records carry the emitting class and, for per-line components, the GPIO
line offset, rendered as ``[Button@17]``.
"""

import logging
import sys
import traceback
from contextlib import suppress
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

LIBRARY_LOGGER_NAME = "gpio_button"


class ColoredFormatter(logging.Formatter):
    """Bracketed ``[time] [level] [source] message`` lines, optionally colored"""

    FORMAT = "[%(asctime)s] [%(levelname)s] [%(source)s] %(message)s"
    LEVEL_COLORS = {
        logging.DEBUG: "\033[94m",
        logging.INFO: "\033[92m",
        logging.WARNING: "\033[93m",
        logging.ERROR: "\033[91m",
        logging.CRITICAL: "\033[95m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = False):
        super().__init__(self.FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        class_name = getattr(record, "class_name", "Main")
        line_offset = getattr(record, "line_offset", None)
        record.source = class_name if line_offset is None else f"{class_name}@{line_offset}"

        text = super().format(record)
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{text}{self.RESET}" if color else text


class ClassLogger:
    """
    Wrapper over one ``logging.Logger`` that tags records with a class name
    (and optionally a line offset) and applies its own minimum level.
    """

    def __init__(self, main_logger: logging.Logger, class_name: str, level: int,
                 line_offset: Optional[int] = None):
        self.main_logger = main_logger
        self.class_name = class_name
        self.level = level
        self.line_offset = line_offset

    def for_line(self, line_offset: int) -> "ClassLogger":
        """Same logger, with records tagged by ``line_offset``"""
        return ClassLogger(self.main_logger, self.class_name, self.level, line_offset)

    def _log(self, level: int, message: str, exception: Optional[BaseException] = None) -> None:
        if level < self.level:
            return
        self.main_logger.log(
            level, message,
            exc_info=exception,
            extra={"class_name": self.class_name, "line_offset": self.line_offset},
        )

    def debug(self, message: str) -> None:
        self._log(logging.DEBUG, message)

    def info(self, message: str) -> None:
        self._log(logging.INFO, message)

    def warning(self, message: str) -> None:
        self._log(logging.WARNING, message)

    def error(self, message: str, exception: Optional[BaseException] = None) -> None:
        """
        Log an error.

        With ``exception``, the message gets its type and the file/line it
        was raised from, and the traceback is attached to the record.
        """
        if exception is not None:
            message = f"{message} | {_describe(exception)}"
        self._log(logging.ERROR, message, exception)

    def critical(self, message: str) -> None:
        self._log(logging.CRITICAL, message)


def _describe(exception: BaseException) -> str:
    frames = traceback.extract_tb(exception.__traceback__)
    if frames:
        origin = frames[-1]
        filename, lineno = Path(origin.filename).name, origin.lineno
    else:
        filename, lineno = "unknown", 0
    return f"Type: {type(exception).__name__} | File: {filename} | Line: {lineno}"


class HybridLogger:
    """
    Logger factory for applications: stdout (colored on a terminal) plus a
    timestamped log file.

    Example:
        main_logger = HybridLogger("reset-button")
        logger = main_logger.get_class_logger("Button", logging.DEBUG)
        button = Button(17, LegacyPUD.UP, logger=logger)
        ...
        main_logger.cleanup()
    """

    def __init__(self, name: str = LIBRARY_LOGGER_NAME, log_dir: Optional[str] = "logs"):
        """
        Args:
            name: Name of the underlying ``logging`` logger
            log_dir: Directory for the log file, or None for console only
        """
        self.name = name
        self.log_dir = log_dir
        self.log_file: Optional[Path] = None
        self.class_loggers: Dict[str, ClassLogger] = {}
        self.main_logger = self._setup_main_logger()

    def _setup_main_logger(self) -> logging.Logger:
        main_logger = logging.getLogger(self.name)
        main_logger.setLevel(logging.DEBUG)
        main_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(use_colors=sys.stdout.isatty()))
        main_logger.addHandler(console_handler)

        if self.log_dir is not None:
            log_dir = Path(self.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = log_dir / f"{self.name}_{datetime.now():%Y-%m-%d_%H-%M-%S}.log"
            file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
            file_handler.setFormatter(ColoredFormatter())
            main_logger.addHandler(file_handler)
        return main_logger

    def get_class_logger(self, class_name: str, level: int = logging.INFO) -> ClassLogger:
        """
        Get (or create) the logger for one class.

        Args:
            class_name: Name shown in the ``[source]`` column
            level: Minimum level this class logs at

        Returns:
            ClassLogger: Cached per-class logger
        """
        if class_name not in self.class_loggers:
            self.class_loggers[class_name] = ClassLogger(self.main_logger, class_name, level)
        return self.class_loggers[class_name]

    def get_main_logger(self, level: int = logging.INFO) -> ClassLogger:
        return self.get_class_logger("Main", level)

    def cleanup(self) -> None:
        """Flush and detach all handlers"""
        for handler in list(self.main_logger.handlers):
            with suppress(OSError, ValueError):
                handler.flush()
                handler.close()
            self.main_logger.removeHandler(handler)


def get_default_logger(class_name: str, level: int = logging.DEBUG) -> ClassLogger:
    """
    ClassLogger on the library's standard logger, without adding handlers.

    Used by components constructed without an explicit logger; output then
    follows whatever ``logging`` configuration the application has.
    """
    return ClassLogger(logging.getLogger(LIBRARY_LOGGER_NAME), class_name, level)
