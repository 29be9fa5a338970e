import json
from unittest.mock import MagicMock

import pytest

from jobhunt import auth
from jobhunt.auth import SCOPES, get_credentials, load_token
from jobhunt.errors import ConfigurationError


def write_token(path, scopes):
    path.write_text(
        json.dumps(
            {
                "token": "access",
                "refresh_token": "refresh",
                "client_id": "client.apps.googleusercontent.com",
                "client_secret": "secret",
                "token_uri": "https://oauth2.googleapis.com/token",
                "scopes": scopes,
            }
        ),
        encoding="utf-8",
    )


def test_missing_client_secrets_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="credentials.json"):
        get_credentials(tmp_path)


def test_token_without_drive_scope_is_discarded(tmp_path):
    write_token(tmp_path / "sheets_token.json", ["https://www.googleapis.com/auth/spreadsheets"])

    assert load_token(tmp_path / "sheets_token.json") is None
    with pytest.raises(ConfigurationError):
        get_credentials(tmp_path)


def test_token_with_all_scopes_is_loaded(tmp_path):
    write_token(tmp_path / "sheets_token.json", SCOPES)

    creds = load_token(tmp_path / "sheets_token.json")

    assert creds is not None
    assert creds.refresh_token == "refresh"


def test_login_flow_saves_token(tmp_path, monkeypatch):
    (tmp_path / "credentials.json").write_text("{}", encoding="utf-8")
    creds = MagicMock()
    creds.to_json.return_value = '{"token": "fresh"}'
    flow = MagicMock()
    flow.run_local_server.return_value = creds
    from_secrets = MagicMock(return_value=flow)
    monkeypatch.setattr(auth.InstalledAppFlow, "from_client_secrets_file", from_secrets)

    assert get_credentials(tmp_path) is creds
    assert from_secrets.call_args.args == (str(tmp_path / "credentials.json"), SCOPES)
    assert (tmp_path / "sheets_token.json").read_text(encoding="utf-8") == '{"token": "fresh"}'
