import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the API process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # model clients log every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
