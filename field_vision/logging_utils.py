"""Per-robot loggers whose records carry the name of the robot they came from."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(robot)s] %(message)s"


class RobotNameFilter(logging.Filter):
    """Stamps ``record.robot`` for LOG_FORMAT."""

    def __init__(self, robot_name: str):
        super().__init__()
        self.robot_name = robot_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.robot = self.robot_name
        return True


def _tagged(handler: logging.Handler, robot_name: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RobotNameFilter(robot_name))
    return handler


def _is_console(handler: logging.Handler) -> bool:
    # FileHandler is a StreamHandler too
    return isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)


def setup_logger(robot_name: str, level: int | str = logging.INFO) -> logging.Logger:
    """
    Logger ``field_vision.<robot_name>`` with a single console handler.

    Calling it again for the same robot only updates the level.
    """
    logger = logging.getLogger(f"field_vision.{robot_name}")
    logger.setLevel(level)
    if not any(_is_console(h) for h in logger.handlers):
        logger.addHandler(_tagged(logging.StreamHandler(), robot_name))
    return logger


def add_file_handler(logger: logging.Logger, robot_name: str, log_path: str) -> logging.Handler:
    """Mirror the logger into a session log file until remove_handler is called."""
    handler = _tagged(logging.FileHandler(log_path), robot_name)
    logger.addHandler(handler)
    return handler


def remove_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    handler.close()
