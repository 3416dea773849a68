import pytest

from mandelview.util.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _reset_mandelview_logger():
    # the CLI installs its own handlers and turns propagation off
    yield
    reset_logging()
