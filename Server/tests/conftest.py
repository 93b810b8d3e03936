"""
Shared fixtures for OrgAdmin Server tests

Each test gets its own SQLite database under tmp_path and a mocked Redis
client for the shared user cache.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import database
from managers.config_manager import ConfigManager
from managers.database_manager import DatabaseManager
from managers.cache_manager import UserCacheManager
from services.user_service import UserService


@pytest.fixture
def config_manager(tmp_path):
    manager = ConfigManager(tmp_path / "config.json")
    manager.load_config()
    manager.config["database_url"] = f"sqlite:///{tmp_path / 'orgadmin.db'}"
    manager.config["log_dir"] = str(tmp_path / "logs")
    return manager


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.get.return_value = None
    client.scan_iter.side_effect = lambda **kwargs: iter([])
    return client


@pytest.fixture
def managers(config_manager, redis_client, monkeypatch):
    db_manager = DatabaseManager(config_manager.get("database_url"))
    admin_password = db_manager.InitializeDatabase()
    cache_manager = UserCacheManager(redis_client=redis_client)

    monkeypatch.setattr(database, "config_manager", config_manager)
    monkeypatch.setattr(database, "db_manager", db_manager)
    monkeypatch.setattr(database, "cache_manager", cache_manager)

    yield SimpleNamespace(
        config=config_manager,
        db=db_manager,
        cache=cache_manager,
        admin_password=admin_password
    )

    db_manager.engine.dispose()


@pytest.fixture
def user_service(managers):
    return UserService(managers.db, managers.cache)


@pytest.fixture
def client(managers):
    from fastapi.testclient import TestClient
    from server import app

    # Lifespan is not run: managers are installed by the fixture above
    return TestClient(app)


@pytest.fixture
def login(client):
    """Return a helper that logs in and builds Authorization headers"""
    def DoLogin(login_id, password):
        response = client.post("/auth/login", json={"loginId": login_id, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return DoLogin


@pytest.fixture
def admin_headers(login, managers):
    return login("admin", managers.admin_password)
