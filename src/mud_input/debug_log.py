import logging
import time

LOGGER_NAME = "mud_input"
DEFAULT_LOG_FILE = "mud_input.log"


class DebugLogger:
    """Toggles a debug log file for everything under the mud_input logger."""

    def __init__(self, path: str = DEFAULT_LOG_FILE):
        self.path = path
        self.enabled = False
        self._handler: logging.FileHandler | None = None
        self._logger = logging.getLogger(LOGGER_NAME)

    def start(self):
        if self._handler:
            return
        self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        self._handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-7s %(name)s | %(message)s", "%H:%M:%S")
        )
        self._handler.setLevel(logging.DEBUG)
        self._handler.stream.write(
            f"\n{'='*60}\n  Session started: {time.strftime('%Y-%m-%d %H:%M:%S')}\n{'='*60}\n"
        )
        self._handler.flush()
        self._logger.addHandler(self._handler)
        self._logger.setLevel(logging.DEBUG)
        self.enabled = True

    def stop(self):
        self.enabled = False
        if self._handler:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
            self._logger.setLevel(logging.NOTSET)

    def toggle(self) -> bool:
        if self.enabled:
            self.stop()
        else:
            self.start()
        return self.enabled
