import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict

from pydantic import ValidationError
from redis import Redis, RedisError

from .config import settings
from .models import Preferences

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Data source URL and refresh interval, persisted in redis.

    Writes go through a single worker so they land in call order without
    blocking the caller.
    """

    def __init__(self, client: Redis):
        self.client = client
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="preferences"
        )

    def load(self) -> Preferences:
        try:
            url = self.client.get(settings.PREFS_URL_KEY)
            interval = self.client.get(settings.PREFS_INTERVAL_KEY)
        except RedisError as e:
            logger.warning(f"Could not read preferences, using defaults: {e}")
            return Preferences()

        values: Dict[str, object] = {}
        if url:
            values["data_url"] = url
        if interval:
            values["refresh_interval"] = interval
        try:
            return Preferences(**values)
        except ValidationError as e:
            logger.warning(f"Ignoring stored refresh interval {interval!r}: {e}")
            return Preferences(**{k: v for k, v in values.items() if k == "data_url"})

    def save(self, prefs: Preferences) -> Future:
        mapping = {
            settings.PREFS_URL_KEY: prefs.data_url,
            settings.PREFS_INTERVAL_KEY: str(prefs.refresh_interval),
        }
        return self._executor.submit(self._write, mapping)

    def save_url(self, url: str) -> Future:
        return self._executor.submit(self._write, {settings.PREFS_URL_KEY: url})

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _write(self, mapping: Dict[str, str]) -> None:
        try:
            self.client.mset(mapping)
        except RedisError as e:
            logger.error(f"Failed to save preferences: {e}")
            raise
        logger.info(f"Saved preferences: {', '.join(mapping)}")
