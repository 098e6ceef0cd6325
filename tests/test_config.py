"""Tests for settings parsing."""

import base64
import json

from pictocat.config import Settings

SERVICE_ACCOUNT = {"type": "service_account", "project_id": "pictocat-test"}


class TestFirebaseCredentials:
    def test_raw_json(self):
        settings = Settings(firebase_service_account_json=json.dumps(SERVICE_ACCOUNT))
        assert settings.firebase_credentials == SERVICE_ACCOUNT

    def test_base64_json(self):
        encoded = base64.b64encode(json.dumps(SERVICE_ACCOUNT).encode()).decode()
        settings = Settings(firebase_service_account_json=encoded)
        assert settings.firebase_credentials == SERVICE_ACCOUNT

    def test_path_wins(self, tmp_path):
        path = tmp_path / "service-account.json"
        path.write_text(json.dumps({**SERVICE_ACCOUNT, "project_id": "from-file"}))
        settings = Settings(
            firebase_service_account_path=str(path),
            firebase_service_account_json=json.dumps(SERVICE_ACCOUNT),
        )
        assert settings.firebase_credentials["project_id"] == "from-file"

    def test_garbage(self):
        assert Settings(firebase_service_account_json="%%%").firebase_credentials is None

    def test_missing(self):
        settings = Settings(firebase_service_account_json=None, firebase_service_account_path=None)
        assert settings.firebase_credentials is None


def test_cors_origins_list():
    settings = Settings(cors_origins="https://a.example, https://b.example,")
    assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


def test_log_level_normalized():
    assert Settings(log_level="debug").log_level == "DEBUG"
