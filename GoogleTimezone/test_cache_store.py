"""Tests for cache store implementations."""
import json
import pytest
from unittest.mock import patch
from cache_store import CacheStoreBase, FileCacheStore, MemoryCacheStore


PAYLOAD = {"status": "OK", "timeZoneId": "Europe/Paris", "rawOffset": 3600, "dstOffset": 0}


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    """Each store implementation, so shared behavior is tested once."""
    if request.param == "memory":
        return MemoryCacheStore()
    return FileCacheStore(str(tmp_path / "cache.json"))


def test_store_is_cache_store(store):
    assert isinstance(store, CacheStoreBase)


def test_store_set_and_get(store):
    """Test storing and reading back a payload."""
    assert store.get("google_timezone_abc") is None
    assert store.set("google_timezone_abc", PAYLOAD, 60) is True
    assert store.get("google_timezone_abc") == PAYLOAD


def test_store_overwrite(store):
    """Test that set replaces an existing entry."""
    store.set("key", {"version": 1}, 60)
    store.set("key", {"version": 2}, 60)
    assert store.get("key") == {"version": 2}


def test_store_expiration(store):
    """Test that entries expire after their lifetime."""
    with patch('cache_store.time.time', return_value=1000.0):
        store.set("key", PAYLOAD, 60)

    with patch('cache_store.time.time', return_value=1059.0):
        assert store.get("key") == PAYLOAD

    with patch('cache_store.time.time', return_value=1060.0):
        assert store.get("key") is None


def test_store_zero_expiration_never_expires(store):
    """Test that a non-positive lifetime keeps the entry indefinitely."""
    with patch('cache_store.time.time', return_value=1000.0):
        store.set("key", PAYLOAD, 0)

    with patch('cache_store.time.time', return_value=10 ** 10):
        assert store.get("key") == PAYLOAD


def test_store_delete(store):
    """Test single-entry delete reports whether something was removed."""
    store.set("key", PAYLOAD, 60)
    assert store.delete("key") is True
    assert store.get("key") is None
    assert store.delete("key") is False


def test_store_delete_by_prefix(store):
    """Test that only keys in the namespace are removed."""
    store.set("google_timezone_a", PAYLOAD, 60)
    store.set("google_timezone_b", PAYLOAD, 60)
    store.set("other_c", PAYLOAD, 60)

    assert store.delete_by_prefix("google_timezone_") is True

    assert store.get("google_timezone_a") is None
    assert store.get("google_timezone_b") is None
    assert store.get("other_c") == PAYLOAD


def test_store_delete_by_prefix_empty(store):
    """Test that a bulk delete with nothing stored still succeeds."""
    assert store.delete_by_prefix("google_timezone_") is True


def test_memory_store_len():
    store = MemoryCacheStore()
    store.set("a", 1, 60)
    store.set("b", 2, 60)
    assert len(store) == 2


def test_file_store_persists_between_instances(tmp_path):
    """Test that a second store on the same file sees earlier entries."""
    path = str(tmp_path / "cache.json")
    FileCacheStore(path).set("key", PAYLOAD, 60)

    assert FileCacheStore(path).get("key") == PAYLOAD


def test_file_store_creates_directory(tmp_path):
    """Test that missing parent directories are created on write."""
    path = tmp_path / "nested" / "dir" / "cache.json"
    store = FileCacheStore(str(path))

    assert store.set("key", PAYLOAD, 60) is True
    assert path.exists()


def test_file_store_corrupt_file_reads_empty(tmp_path):
    """Test that an unreadable cache file is treated as empty."""
    path = tmp_path / "cache.json"
    path.write_text("{not json", encoding="utf-8")
    store = FileCacheStore(str(path))

    assert store.get("key") is None
    assert store.set("key", PAYLOAD, 60) is True
    assert store.get("key") == PAYLOAD


def test_file_store_drops_expired_entries_on_write(tmp_path):
    """Test that expired entries are pruned when the file is rewritten."""
    path = tmp_path / "cache.json"
    store = FileCacheStore(str(path))

    with patch('cache_store.time.time', return_value=1000.0):
        store.set("old", PAYLOAD, 10)
    with patch('cache_store.time.time', return_value=2000.0):
        store.set("new", PAYLOAD, 10)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert list(data) == ["new"]


def test_file_store_write_failure(tmp_path):
    """Test that storage errors are reported as False."""
    store = FileCacheStore(str(tmp_path / "cache.json"))
    store.set("google_timezone_a", PAYLOAD, 60)

    with patch('cache_store.os.replace', side_effect=OSError("disk full")):
        assert store.set("google_timezone_b", PAYLOAD, 60) is False
        assert store.delete_by_prefix("google_timezone_") is False

    assert store.get("google_timezone_a") == PAYLOAD


def test_file_store_unserializable_value(tmp_path):
    """Test that a value json cannot encode fails cleanly without a stray temp file."""
    path = tmp_path / "cache.json"
    store = FileCacheStore(str(path))
    store.set("google_timezone_a", PAYLOAD, 60)

    assert store.set("google_timezone_b", {"when": object()}, 60) is False

    assert not (tmp_path / "cache.json.tmp").exists()
    assert store.get("google_timezone_a") == PAYLOAD
    assert store.get("google_timezone_b") is None


def test_file_store_write_failure_removes_temp_file(tmp_path):
    """Test that a failed replace does not leave the temp file behind."""
    store = FileCacheStore(str(tmp_path / "cache.json"))

    with patch('cache_store.os.replace', side_effect=OSError("disk full")):
        assert store.set("key", PAYLOAD, 60) is False

    assert not (tmp_path / "cache.json.tmp").exists()
