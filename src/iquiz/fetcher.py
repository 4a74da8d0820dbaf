import logging
from typing import List, Optional
from urllib.parse import urlsplit

import requests
from pydantic import TypeAdapter, ValidationError

from .errors import DecodeError, InvalidURL, NetworkUnavailable, TransportError
from .models import Topic
from .reachability import AlwaysReachable, Reachability

logger = logging.getLogger(__name__)

_TOPIC_LIST = TypeAdapter(List[Topic])


def validate_url(url: str) -> str:
    """Return the normalised form of `url` or raise InvalidURL."""
    if not url or any(c.isspace() for c in url):
        raise InvalidURL(f"Invalid URL: {url!r}")
    request = requests.PreparedRequest()
    try:
        request.prepare_url(url, None)
    except requests.exceptions.RequestException as e:
        raise InvalidURL(f"Invalid URL: {e}") from e
    parts = urlsplit(request.url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidURL(f"Invalid URL: {url!r}")
    return request.url


def decode_topics(payload: bytes) -> List[Topic]:
    try:
        return _TOPIC_LIST.validate_json(payload, context={"wire": True})
    except ValidationError as e:
        raise DecodeError(f"Error decoding JSON: {e}") from e


class QuizDataFetcher:
    """One GET of the topic list, decoded all-or-nothing.

    The fetcher never touches application state; callers decide what to do
    with the topics it returns or the FetchError it raises.
    """

    def __init__(
        self,
        reachability: Optional[Reachability] = None,
        http: Optional[requests.Session] = None,
    ):
        self.reachability = reachability or AlwaysReachable()
        self.http = http or requests.Session()

    def fetch(self, url: str) -> List[Topic]:
        url = validate_url(url)

        if not self.reachability.is_connected(url):
            raise NetworkUnavailable()

        logger.info(f"Fetching quiz data from {url}")
        try:
            response = self.http.get(url)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Fetch from {url} failed: {e}")
            raise TransportError(f"Error fetching data: {e}") from e

        try:
            topics = decode_topics(response.content)
        except DecodeError as e:
            logger.error(f"Payload from {url} rejected: {e}")
            raise
        logger.info(f"Decoded {len(topics)} topics from {url}")
        return topics
