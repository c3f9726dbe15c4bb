import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s [%(camera)s] %(message)s"


class CameraNameFilter(logging.Filter):
    def __init__(self, camera_name: str):
        super().__init__()
        self.camera_name = camera_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.camera = self.camera_name
        return True


def _attach(logger: logging.Logger, handler: logging.Handler, camera_name: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CameraNameFilter(camera_name))
    logger.addHandler(handler)
    return handler


def setup_logger(camera_name: str, level: int = logging.INFO) -> logging.Logger:
    """Console logger for one museum session, tagged with the camera name."""
    logger = logging.getLogger(f"augmented_museum.{camera_name}")
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        _attach(logger, logging.StreamHandler(), camera_name)

    return logger


def add_file_handler(logger: logging.Logger, camera_name: str, log_path: str) -> logging.Handler:
    Path(log_path).parent.mkdir(parents=True, exist_ok=True)
    return _attach(logger, logging.FileHandler(log_path), camera_name)


def close_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    handler.close()
