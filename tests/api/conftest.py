from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

from app.api.v1.dependencies import get_session_factory
from app.db.session import get_db
from app.main import app


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def n8n_post():
    """Nenhum teste de API sai para a rede: requests.post do dispatcher é sempre um mock."""
    response = Mock(status_code=200, reason="OK", text='{"ok": true}')
    with patch("app.services.notification_service.requests.post", return_value=response) as mocked:
        yield mocked
