# influencer_iq/tools/logger.py
import os
import sys
from datetime import datetime
from typing import Optional

LEVELS = {"DEBUG": 0, "INFO": 1, "WARNING": 2, "ERROR": 3}


def should_log(level: str) -> bool:
    """Check if we should log at the given level based on INFLUENCER_IQ_LOG_LEVEL env var."""
    current_level = os.environ.get("INFLUENCER_IQ_LOG_LEVEL", "INFO").upper()
    return LEVELS.get(level, 1) >= LEVELS.get(current_level, 1)


class AppLogger:
    """
    Simple component logger:
    - prints to stdout (warnings and errors to stderr)
    - optionally appends to a logfile (INFLUENCER_IQ_LOG_FILE)
    """

    def __init__(self, component: str, logfile_path: Optional[str] = None):
        self.component = component
        self.logfile_path = logfile_path

        if self.logfile_path:
            logdir = os.path.dirname(self.logfile_path)
            if logdir:
                os.makedirs(logdir, exist_ok=True)
            # Touch early so it exists even if we crash later
            with open(self.logfile_path, "a", encoding="utf-8") as f:
                f.write("")

    def log(self, msg: str, level: str = "INFO") -> None:
        if not should_log(level):
            return
        ts = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{ts}] {level} {self.component}: {msg}"
        stream = sys.stderr if LEVELS.get(level, 1) >= LEVELS["WARNING"] else sys.stdout
        print(line, file=stream)
        if self.logfile_path:
            with open(self.logfile_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")

    def debug(self, msg: str) -> None:
        self.log(msg, "DEBUG")

    def info(self, msg: str) -> None:
        self.log(msg, "INFO")

    def warning(self, msg: str) -> None:
        self.log(msg, "WARNING")

    def error(self, msg: str) -> None:
        self.log(msg, "ERROR")


def make_logger(component: str, logfile_path: str | None = None) -> AppLogger:
    if logfile_path is None:
        logfile_path = os.environ.get("INFLUENCER_IQ_LOG_FILE") or None
    return AppLogger(component=component, logfile_path=logfile_path)
