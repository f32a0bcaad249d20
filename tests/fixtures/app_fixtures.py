"""FastAPI app fixtures wired to the test object stores."""
import pytest
from fastapi.testclient import TestClient

from vault_api.config.settings import Settings, get_settings
from vault_api.main import create_app
from tests.consts import TEST_BUCKET_NAME


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(deployment_mode="local-dev", s3_bucket_name=TEST_BUCKET_NAME)


@pytest.fixture
def client(test_settings, memory_store) -> TestClient:
    """API client backed by an in-memory store."""
    with TestClient(create_app(settings=test_settings, store=memory_store)) as test_client:
        yield test_client


@pytest.fixture
def s3_api_client(test_settings, s3_store) -> TestClient:
    """API client backed by the moto S3 bucket."""
    with TestClient(create_app(settings=test_settings, store=s3_store)) as test_client:
        yield test_client


@pytest.fixture
def failing_client(test_settings, failing_store) -> TestClient:
    with TestClient(create_app(settings=test_settings, store=failing_store)) as test_client:
        yield test_client
