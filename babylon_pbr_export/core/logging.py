import logging
from typing import List, Tuple

LOGGER_NAME = "babylon_pbr_export"


class ExportLogger:
    """Collects log messages during export for later display.

    Every message carries a rank, an indentation hint mirroring how deep in
    the material -> texture -> channel hierarchy it was raised.
    """

    def __init__(self, max_messages: int = 500):
        self.max_messages = max_messages
        self._messages: List[Tuple[str, int, str]] = []  # (level, rank, message)
        self._logger = logging.getLogger(LOGGER_NAME)

    def verbose(self, msg: str, rank: int = 0) -> None:
        self._log("DEBUG", msg, rank)

    def message(self, msg: str, rank: int = 0) -> None:
        self._log("INFO", msg, rank)

    def warning(self, msg: str, rank: int = 0) -> None:
        self._log("WARNING", msg, rank)

    def error(self, msg: str, rank: int = 0) -> None:
        self._log("ERROR", msg, rank)

    def _log(self, level: str, msg: str, rank: int) -> None:
        if len(self._messages) < self.max_messages:
            self._messages.append((level, rank, msg))
        self._logger.log(getattr(logging, level), "%s%s", "  " * rank, msg)

    @property
    def messages(self) -> List[Tuple[str, int, str]]:
        return self._messages

    @property
    def has_errors(self) -> bool:
        return any(lvl == "ERROR" for lvl, _, _ in self._messages)

    @property
    def error_count(self) -> int:
        return sum(1 for lvl, _, _ in self._messages if lvl == "ERROR")

    @property
    def warning_count(self) -> int:
        return sum(1 for lvl, _, _ in self._messages if lvl == "WARNING")

    def messages_at(self, level: str) -> List[str]:
        return [msg for lvl, _, msg in self._messages if lvl == level]

    def clear(self) -> None:
        self._messages.clear()
