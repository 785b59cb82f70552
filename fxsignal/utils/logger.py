import logging

LOGGER_NAME = "FXSignal"

def setup_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    LOG_FMT = "%(asctime)s │ %(levelname)-7s │ %(message)s"
    logging.basicConfig(level=level, format=LOG_FMT, datefmt="%H:%M:%S")
    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger

log = logging.getLogger(LOGGER_NAME)
