import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level="WARNING"):
    '''
    Log to stderr so stdout only carries metric lines.
    Unknown level names fall back to WARNING.
    '''
    log_level = logging.getLevelName(str(level).upper())
    if not isinstance(log_level, int):
        log_level = logging.WARNING

    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    logging.debug("Logging configured: level=%s", logging.getLevelName(log_level))
