import logging
import threading
from typing import List, Optional

from .errors import FetchError, InvalidURL, RefreshInProgress
from .fetcher import QuizDataFetcher, validate_url
from .models import Preferences, RefreshResult, Topic
from .preferences import PreferencesStore
from .scheduler import RefreshScheduler
from .session import QuizSession

logger = logging.getLogger(__name__)


class QuizController:
    """Owns the topic list, preferences and the refresh timer.

    The topic list is only ever replaced wholesale by a successful refresh.
    At most one refresh runs at a time; a second caller is turned away
    rather than queued. Completions are last-writer-wins.
    """

    def __init__(
        self,
        fetcher: QuizDataFetcher,
        store: PreferencesStore,
        scheduler: Optional[RefreshScheduler] = None,
    ):
        self.fetcher = fetcher
        self.store = store
        self.scheduler = scheduler or RefreshScheduler()
        self.preferences = Preferences()
        self.notice: Optional[str] = None
        self._topics: List[Topic] = []
        self._refresh_lock = threading.Lock()

    # --- Lifecycle ---
    def startup(self) -> None:
        self.preferences = self.store.load()
        logger.info(
            f"Starting with {self.preferences.data_url} "
            f"every {self.preferences.refresh_interval}s"
        )
        self.refresh()
        self.scheduler.start(self.preferences.refresh_interval, self.refresh)

    def shutdown(self) -> None:
        self.scheduler.stop()
        self.store.close()

    # --- Topics ---
    @property
    def topics(self) -> List[Topic]:
        return list(self._topics)

    def get_topic(self, topic_id: str) -> Topic:
        for topic in self._topics:
            if topic.id == topic_id:
                return topic
        raise KeyError(topic_id)

    def refresh(self, url: Optional[str] = None) -> RefreshResult:
        url = url or self.preferences.data_url
        if not self._refresh_lock.acquire(blocking=False):
            error = RefreshInProgress()
            logger.info(f"Skipped refresh of {url}: {error.message}")
            return RefreshResult(ok=False, url=url, error=error.message)
        try:
            url = validate_url(url)
            topics = self.fetcher.fetch(url)
            self._topics = topics
            self.notice = None
        except FetchError as e:
            self.notice = e.message
            return RefreshResult(ok=False, url=url, error=e.message)
        finally:
            self._refresh_lock.release()

        self.store.save_url(url)
        return RefreshResult(ok=True, url=url, topic_count=len(topics))

    def dismiss_notice(self) -> None:
        self.notice = None

    # --- Settings ---
    def update_settings(
        self, url: str, refresh_interval: float, save: bool = True
    ) -> Preferences:
        try:
            url = validate_url(url)
        except InvalidURL as e:
            self.notice = e.message
            raise
        prefs = Preferences(data_url=url, refresh_interval=refresh_interval)
        interval_changed = prefs.refresh_interval != self.preferences.refresh_interval
        self.preferences = prefs

        if interval_changed and self.scheduler.running:
            self.scheduler.stop()
            self.scheduler.start(prefs.refresh_interval, self.refresh)
        if save:
            self.store.save(prefs)
        return prefs

    # --- Sessions ---
    def start_session(self, topic_id: str) -> QuizSession:
        return QuizSession(self.get_topic(topic_id))
