import sys
import pytest
import logging
from zxeval import logger as zxeval_logger
from zxeval.log import CallOrderFilter, LOG_FORMAT, reset_call_order
SEP_STR = "#" * 150


def pytest_addoption(parser):
    parser.addoption(
        "--runslow", action="store_true", default=False, help="run slow tests"
    )
    parser.addoption(
        "--showlogs",
        action="store_true",
        default=False,
        help="show zxeval DEBUG logs even if tests pass",
    )
    parser.addoption(
        "--log_to_console",
        action="store_true",
        default=False,
        help="will log debugs to console"
    )


def pytest_configure(config):
    show = config.getoption("--showlogs")
    log_to_console = config.getoption("log_to_console")

    if show or log_to_console:
        # Re-attach a console handler at DEBUG level
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(logging.DEBUG)
        ch.addFilter(CallOrderFilter())
        ch.setFormatter(logging.Formatter(LOG_FORMAT))
        zxeval_logger.addHandler(ch)

    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow"):
        return
    skip = pytest.mark.skip(reason="need --runslow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip)


@pytest.fixture(autouse=True)
def log_test_name(request):
    reset_call_order()
    zxeval_logger.debug(f"{SEP_STR}\nStarting test: {request.node.name}")
