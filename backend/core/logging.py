import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQL echo is controlled by DATABASE_ECHO, not by the app log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
