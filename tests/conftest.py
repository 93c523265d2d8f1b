"""Pytest fixtures for the automation gateway tests."""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.database.postgres import PostgresDB
from src.integrations.clients.mocks.automation import MockAutomationClient
from src.integrations.clients.mocks.identity import StaticIdentityVerifier
from src.integrations.contracts.interfaces import Identity
from src.utils.config_loader import GatewaySettings

USER_TOKEN = "user-token-1"
CALLBACK_SECRET = "n8n-inbound-secret"


@pytest.fixture
def settings():
    return GatewaySettings(
        integrations_mode="mock",
        checkout_webhook_url="https://n8n.example.com/webhook/checkout",
        checkout_webhook_secret="checkout-secret",
        creations_webhook_with_lyrics_url="https://n8n.example.com/webhook/lyrics",
        creations_webhook_no_lyrics_url="https://n8n.example.com/webhook/inspiration",
        creations_webhook_secret="creations-secret",
        purchase_update_secret=CALLBACK_SECRET,
    )


@pytest.fixture
def db():
    """In-memory PostgresDB stub for tests."""
    store = PostgresDB()
    store.add_music("Neon Nights", 19.9, music_id="music-paid")
    store.add_music("Free Jam", 0, music_id="music-free")
    store.add_purchase("music-paid", usuario_id="user-1", purchase_id="purchase-1")
    return store


@pytest.fixture
def identity_verifier():
    return StaticIdentityVerifier({USER_TOKEN: Identity(id="user-1", email="ana@example.com")})


@pytest.fixture
def automation():
    return MockAutomationClient()


@pytest.fixture
def client(settings, db, identity_verifier, automation):
    app = create_app(settings, identity_verifier=identity_verifier, store=db, automation_client=automation)
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {USER_TOKEN}"}
