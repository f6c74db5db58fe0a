"""Tests for bearer credential providers."""

import pytest

from menuboard.backend.credentials import (
    ChainedCredentialProvider,
    CredentialProvider,
    EnvCredentialProvider,
    StaticCredentialProvider,
    TokenFileCredentialProvider,
    create_credential_provider,
)
from menuboard.config import AuthConfig, DashboardConfig


def test_cannot_instantiate_abstract():
    with pytest.raises(TypeError):
        CredentialProvider()


class TestStatic:
    def test_returns_token(self):
        assert StaticCredentialProvider("tok").get_credential() == "tok"

    def test_empty_is_none(self):
        assert StaticCredentialProvider("").get_credential() is None
        assert StaticCredentialProvider(None).get_credential() is None


class TestEnv:
    def test_reads_variable(self, monkeypatch):
        monkeypatch.setenv("TEST_MENU_TOKEN", "  from-env \n")
        assert EnvCredentialProvider("TEST_MENU_TOKEN").get_credential() == "from-env"

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("TEST_MENU_TOKEN", raising=False)
        assert EnvCredentialProvider("TEST_MENU_TOKEN").get_credential() is None


class TestTokenFile:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "token"
        path.write_text("from-file\n")
        assert TokenFileCredentialProvider(path).get_credential() == "from-file"

    def test_missing_file(self, tmp_path):
        assert TokenFileCredentialProvider(tmp_path / "nope").get_credential() is None

    def test_blank_file(self, tmp_path):
        path = tmp_path / "token"
        path.write_text("   \n")
        assert TokenFileCredentialProvider(path).get_credential() is None


class TestChain:
    def test_first_non_empty_wins(self):
        chain = ChainedCredentialProvider([
            StaticCredentialProvider(None),
            StaticCredentialProvider("second"),
            StaticCredentialProvider("third"),
        ])
        assert chain.get_credential() == "second"

    def test_all_empty(self):
        chain = ChainedCredentialProvider([StaticCredentialProvider("")])
        assert chain.get_credential() is None


class TestFactory:
    def test_config_token_first(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TEST_MENU_TOKEN", "env-token")
        config = DashboardConfig(auth=AuthConfig(
            token="config-token",
            token_env="TEST_MENU_TOKEN",
            token_path=str(tmp_path / "token"),
        ))
        assert create_credential_provider(config).get_credential() == "config-token"

    def test_env_before_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TEST_MENU_TOKEN", "env-token")
        token_file = tmp_path / "token"
        token_file.write_text("file-token")
        config = DashboardConfig(auth=AuthConfig(
            token_env="TEST_MENU_TOKEN", token_path=str(token_file),
        ))
        assert create_credential_provider(config).get_credential() == "env-token"

    def test_falls_back_to_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TEST_MENU_TOKEN", raising=False)
        token_file = tmp_path / "token"
        token_file.write_text("file-token")
        config = DashboardConfig(auth=AuthConfig(
            token_env="TEST_MENU_TOKEN", token_path=str(token_file),
        ))
        assert create_credential_provider(config).get_credential() == "file-token"
