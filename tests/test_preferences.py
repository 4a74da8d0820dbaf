from unittest.mock import MagicMock

from redis import RedisError

from iquiz.config import settings
from iquiz.models import Preferences
from iquiz.preferences import PreferencesStore


def test_load_defaults_when_empty(store):
    prefs = store.load()
    assert prefs.data_url == settings.DEFAULT_DATA_URL
    assert prefs.refresh_interval == settings.DEFAULT_REFRESH_INTERVAL


def test_save_then_load(store, fake_redis):
    prefs = Preferences(data_url="https://quiz.example.com/a.json", refresh_interval=15)
    store.save(prefs).result(timeout=2)
    assert fake_redis.data[settings.PREFS_URL_KEY] == "https://quiz.example.com/a.json"
    assert store.load() == prefs


def test_save_url_leaves_interval(store, fake_redis):
    fake_redis.set(settings.PREFS_INTERVAL_KEY, "30.0")
    store.save_url("https://quiz.example.com/b.json").result(timeout=2)
    prefs = store.load()
    assert prefs.data_url == "https://quiz.example.com/b.json"
    assert prefs.refresh_interval == 30.0


def test_bad_stored_interval_falls_back(store, fake_redis):
    fake_redis.set(settings.PREFS_URL_KEY, "https://quiz.example.com/c.json")
    fake_redis.set(settings.PREFS_INTERVAL_KEY, "-5")
    prefs = store.load()
    assert prefs.data_url == "https://quiz.example.com/c.json"
    assert prefs.refresh_interval == settings.DEFAULT_REFRESH_INTERVAL


def test_redis_down_on_load_gives_defaults():
    client = MagicMock()
    client.get.side_effect = RedisError("connection refused")
    store = PreferencesStore(client)
    try:
        assert store.load() == Preferences()
    finally:
        store.close()


def test_failed_save_surfaces_on_future():
    client = MagicMock()
    client.mset.side_effect = RedisError("read only")
    store = PreferencesStore(client)
    try:
        future = store.save(Preferences())
        assert isinstance(future.exception(timeout=2), RedisError)
    finally:
        store.close()


def test_stored_infinite_interval_falls_back(store, fake_redis):
    fake_redis.set(settings.PREFS_INTERVAL_KEY, "inf")
    assert store.load().refresh_interval == settings.DEFAULT_REFRESH_INTERVAL
