import pytest

from HTMLtoPDFUsingChromium.config import PipelineConfig, reset_config
from HTMLtoPDFUsingChromium.tests.fakes import make_pdf


@pytest.fixture(autouse=True)
def _clean_global_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Default configuration, independent of the environment."""
    return PipelineConfig()


@pytest.fixture
def pdf_factory():
    return make_pdf
