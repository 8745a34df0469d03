"""
Tests for secret storage backends.
"""

import os
import platform

import keyring
import pytest
from keyring.errors import KeyringError, PasswordDeleteError

from crowdin_oauth import (
    FileSecretStore,
    KeyringSecretStore,
    SecretStoreError,
    create_secret_store,
)


class TestFileSecretStore:
    """Test the file backend"""

    def test_missing_file(self, tmp_path):
        """Test loading when nothing was saved"""
        assert FileSecretStore(str(tmp_path / "token.json")).load() is None

    def test_save_and_load(self, tmp_path):
        """Test saving creates the directory and file"""
        path = tmp_path / "nested" / "token.json"
        store = FileSecretStore(str(path))
        store.save("secret")

        assert path.read_text(encoding="utf-8") == "secret"
        assert store.load() == "secret"

    @pytest.mark.skipif(platform.system() == "Windows", reason="POSIX permissions")
    def test_permissions(self, tmp_path):
        """Test the file is readable only by the owner"""
        path = tmp_path / "dir" / "token.json"
        FileSecretStore(str(path)).save("secret")

        assert os.stat(path).st_mode & 0o777 == 0o600
        assert os.stat(path.parent).st_mode & 0o777 == 0o700

    def test_delete(self, tmp_path):
        """Test deleting, including when nothing is stored"""
        path = tmp_path / "token.json"
        store = FileSecretStore(str(path))
        store.delete()
        store.save("secret")
        store.delete()

        assert not path.exists()

    def test_unreadable_file(self, tmp_path):
        """Test read errors are reported as SecretStoreError"""
        path = tmp_path / "token.json"
        path.mkdir()

        with pytest.raises(SecretStoreError):
            FileSecretStore(str(path)).load()


class TestKeyringSecretStore:
    """Test the OS keyring backend"""

    @pytest.fixture
    def vault(self, monkeypatch):
        vault = {}

        def delete_password(service, username):
            if (service, username) not in vault:
                raise PasswordDeleteError("not found")
            del vault[(service, username)]

        monkeypatch.setattr(keyring, "get_password", lambda s, u: vault.get((s, u)))
        monkeypatch.setattr(keyring, "set_password", lambda s, u, p: vault.__setitem__((s, u), p))
        monkeypatch.setattr(keyring, "delete_password", delete_password)
        return vault

    def test_round_trip(self, vault):
        """Test save, load and delete"""
        store = KeyringSecretStore("Crowdin", "access_token")
        assert store.load() is None

        store.save("secret")
        assert vault[("Crowdin", "access_token")] == "secret"
        assert store.load() == "secret"

        store.delete()
        assert store.load() is None

    def test_delete_missing(self, vault):
        """Test deleting when nothing is stored"""
        KeyringSecretStore("Crowdin", "access_token").delete()

    def test_keyring_failure(self, monkeypatch):
        """Test keyring errors are wrapped"""
        def locked(service, username):
            raise KeyringError("locked")

        monkeypatch.setattr(keyring, "get_password", locked)

        with pytest.raises(SecretStoreError):
            KeyringSecretStore("Crowdin", "access_token").load()


class TestCreateSecretStore:
    """Test backend selection"""

    def test_backends(self):
        """Test known backend names"""
        assert isinstance(create_secret_store("keyring"), KeyringSecretStore)
        assert isinstance(create_secret_store("FILE"), FileSecretStore)

    def test_unknown_backend(self):
        """Test unknown backend name"""
        with pytest.raises(ValueError):
            create_secret_store("vault")
