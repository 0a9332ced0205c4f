import logging
import sys
import os
import threading

_RECORD_COUNTER = 0
_RECORD_COUNTER_LOCK = threading.Lock()

ROOT_NAME = "zxeval"
LOG_FORMAT = "[%(call_order)d] %(message)s - %(filename)s - %(funcName)s()"

ROOT_LOGGER, FILE_HANDLER, STREAM_HANDLER = None, None, None


class CallOrderFilter(logging.Filter):
    """Filter that adds a sequential call_order attribute to each log record."""
    def filter(self, record):
        global _RECORD_COUNTER
        if hasattr(record, "call_order"):
            # already stamped by another handler
            return True
        with _RECORD_COUNTER_LOCK:
            _RECORD_COUNTER += 1
            record.call_order = _RECORD_COUNTER
        return True


def setup_root_logger(log_file_name=None):
    """Configure the one-and-only file handler, filter, etc., on the zxeval root logger.

    The log file defaults to ``ZXEVAL_LOG_FILE`` (``zxeval.log`` when unset); an
    empty value disables file logging. ``LOG_TO_CONSOLE=true`` adds a stdout
    handler and ``ZXEVAL_LOG_LEVEL`` sets the level of both.
    """
    global ROOT_LOGGER, FILE_HANDLER, STREAM_HANDLER
    if ROOT_LOGGER is not None:
        return ROOT_LOGGER

    if log_file_name is None:
        log_file_name = os.getenv("ZXEVAL_LOG_FILE", "zxeval.log")
    level = logging.getLevelName(os.getenv("ZXEVAL_LOG_LEVEL", "DEBUG").upper())
    if not isinstance(level, int):
        level = logging.DEBUG

    ROOT_LOGGER = logging.getLogger(ROOT_NAME)
    ROOT_LOGGER.setLevel(level)
    ROOT_LOGGER.propagate = False

    call_filter = CallOrderFilter()

    if log_file_name:
        log_file = os.path.join(os.getcwd(), log_file_name)
        try:
            FILE_HANDLER = logging.FileHandler(log_file, mode="w")
        except OSError as e:
            print(f"Failed to set up file logging: {e}", file=sys.stderr)
        else:
            FILE_HANDLER.setLevel(level)
            FILE_HANDLER.addFilter(call_filter)
            FILE_HANDLER.setFormatter(logging.Formatter(LOG_FORMAT))
            ROOT_LOGGER.addHandler(FILE_HANDLER)

    if os.getenv("LOG_TO_CONSOLE", "false").lower() == "true":
        STREAM_HANDLER = logging.StreamHandler(sys.stdout)
        STREAM_HANDLER.setLevel(level)
        STREAM_HANDLER.addFilter(call_filter)
        STREAM_HANDLER.setFormatter(logging.Formatter(LOG_FORMAT))
        ROOT_LOGGER.addHandler(STREAM_HANDLER)

    return ROOT_LOGGER


def get_logger(name=""):
    """
    Returns either:
      - the root 'zxeval' logger, if name=="" or "zxeval"
      - or a child 'zxeval.<name>' logger
    """
    root = setup_root_logger()
    if name in ("", ROOT_NAME):
        return root
    if name.startswith(ROOT_NAME + "."):
        name = name[len(ROOT_NAME) + 1:]
    lg = logging.getLogger(f"{ROOT_NAME}.{name}")
    # records go up to 'zxeval' where the handlers live
    lg.propagate = True
    return lg


def reset_call_order():
    """Zero out the counter so the next log will be [1]."""
    global _RECORD_COUNTER
    with _RECORD_COUNTER_LOCK:
        _RECORD_COUNTER = 0
