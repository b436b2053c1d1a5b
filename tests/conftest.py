# tests/conftest.py
import pytest

from mint2story import create_app
from mint2story.services import story_service
from tests.story_fakes import REGISTRY_ADDRESS

TEST_EMAIL = "creator_test@example.com"
TEST_PASSWORD = "password123"


@pytest.fixture(autouse=True)
def story_env(monkeypatch):
    monkeypatch.setenv("STORY_PRIVATE_KEY", "0x" + "11" * 32)
    monkeypatch.setenv("STORY_TESTNET_RPC", "http://localhost:8545")
    monkeypatch.setenv("STORY_REGISTRY_CONTRACT", REGISTRY_ADDRESS)
    monkeypatch.delenv("STORY_SDK_ADAPTER", raising=False)
    story_service.reset_story_client()
    yield
    story_service.reset_story_client()


@pytest.fixture
def install_client(monkeypatch):
    """Make the Story client builder return the given fake; returns the list of builds."""
    builds = []

    def install(client):
        def build():
            builds.append(client)
            return client
        monkeypatch.setattr(story_service, "_build_client", build)
        return builds

    return install


@pytest.fixture
def forbid_client(monkeypatch):
    builds = []

    def build():
        builds.append(True)
        raise AssertionError("Story client must not be built")

    monkeypatch.setattr(story_service, "_build_client", build)
    return builds


@pytest.fixture
def app():
    app = create_app('testing')
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(client):
    response = client.post('/api/auth/register', json={'email': TEST_EMAIL, 'password': TEST_PASSWORD})
    assert response.status_code == 201
    token = response.get_json()['token']
    return {'Authorization': f'Bearer {token}'}
