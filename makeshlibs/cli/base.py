import logging
import sys


def setup_logging(log_level: int):
    handlers = []

    # Messages logged at level INFO or lower go to stdout
    info_handler = logging.StreamHandler(stream=sys.stdout)
    info_handler.setLevel(log_level)
    info_handler.addFilter(lambda record: record.levelno <= logging.INFO)  # pragma: no cover
    handlers.append(info_handler)

    # Warnings and errors go to stderr
    logging.lastResort.addFilter(lambda record: record.levelno > logging.INFO)  # pragma: no cover
    handlers.append(logging.lastResort)

    if log_level == logging.INFO:
        # In normal operation, don't decorate messages
        for handler in handlers:
            handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        for handler in handlers:
            handler.setFormatter(logging.Formatter("dh_makeshlibs: %(levelname)s: %(message)s"))

    logging.basicConfig(level=log_level, handlers=handlers)
