"""Tests for access token storage."""

import json
import os
import stat

import pytest

from pocket_kindle.errors import DeserializationError, NotLoggedIn, StorageError
from pocket_kindle.oauth.storage import PersistedSession, TokenStore, mask_token


@pytest.fixture
def state_file(tmp_path):
    return tmp_path / "state" / ".pocket-repository-state"


class TestPersistedSession:
    """Tests for the on-disk session shape."""

    def test_to_dict_uses_camel_case_key(self):
        assert PersistedSession(access_token="abc").to_dict() == {"accessToken": "abc"}

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(DeserializationError):
            PersistedSession.from_dict(["accessToken"])

    def test_from_dict_rejects_missing_token(self):
        with pytest.raises(DeserializationError) as exc_info:
            PersistedSession.from_dict({"token": "abc"})
        assert exc_info.value.details == {"keys": ["token"]}

    def test_from_dict_rejects_empty_token(self):
        with pytest.raises(DeserializationError):
            PersistedSession.from_dict({"accessToken": ""})


class TestTokenStore:
    """Tests for TokenStore."""

    def test_get_after_set(self, state_file):
        store = TokenStore(state_file)
        assert store.get() is None

        store.set("abc")
        assert store.get() == "abc"

    def test_set_does_not_touch_disk(self, state_file):
        store = TokenStore(state_file)
        store.set("abc")
        assert not state_file.exists()

    def test_load_missing_file_is_noop(self, state_file):
        store = TokenStore(state_file)
        store.load()
        assert store.get() is None

    def test_load_valid_file(self, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text(json.dumps({"accessToken": "abc"}))

        store = TokenStore(state_file)
        store.load()
        assert store.get() == "abc"

    def test_load_invalid_json_raises(self, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text("{not json")

        store = TokenStore(state_file)
        with pytest.raises(DeserializationError):
            store.load()
        assert store.get() is None

    def test_load_wrong_shape_raises(self, state_file):
        state_file.parent.mkdir(parents=True)
        state_file.write_text(json.dumps({"access_token": "abc"}))

        with pytest.raises(DeserializationError):
            TokenStore(state_file).load()

    def test_load_unreadable_path_raises_storage_error(self, tmp_path):
        # A directory where the file should be cannot be read as text.
        state_file = tmp_path / "state"
        state_file.mkdir()

        with pytest.raises(StorageError):
            TokenStore(state_file).load()

    def test_save_and_load_round_trip(self, state_file):
        store = TokenStore(state_file)
        store.set("abc")
        store.save()

        assert json.loads(state_file.read_text()) == {"accessToken": "abc"}

        fresh = TokenStore(state_file)
        fresh.load()
        assert fresh.get() == "abc"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_save_restricts_permissions(self, state_file):
        store = TokenStore(state_file)
        store.set("abc")
        store.save()

        mode = stat.S_IMODE(state_file.stat().st_mode)
        assert mode == 0o600

    def test_save_without_token_raises(self, state_file):
        with pytest.raises(NotLoggedIn):
            TokenStore(state_file).save()
        assert not state_file.exists()

    def test_clear_removes_file_and_memory(self, state_file):
        store = TokenStore(state_file)
        store.set("abc")
        store.save()

        store.clear()

        assert store.get() is None
        assert not state_file.exists()
        assert store.has_persisted_state() is False

    def test_clear_without_file_raises_but_drops_memory(self, state_file):
        store = TokenStore(state_file)
        store.set("abc")

        with pytest.raises(NotLoggedIn):
            store.clear()
        assert store.get() is None


class TestMaskToken:
    def test_mask_hides_most_of_token(self):
        masked = mask_token("abcdefghijklmnop")
        assert "ijklmnop" not in masked
        assert masked.startswith("abcd")

    def test_mask_none(self):
        assert mask_token(None) == "<none>"
