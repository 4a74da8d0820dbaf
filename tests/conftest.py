import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import requests

from iquiz.controller import QuizController
from iquiz.fetcher import QuizDataFetcher
from iquiz.models import Topic
from iquiz.preferences import PreferencesStore
from iquiz.reachability import AlwaysReachable

DATA_URL = "https://quiz.example.com/questions.json"


class InMemoryRedis:
    """Just enough of the redis client API for the quiz service."""

    def __init__(self):
        self.data: Dict[str, str] = {}
        self.expiry: Dict[str, Any] = {}

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: Any, ex: Any = None) -> bool:
        self.data[key] = str(value)
        if ex is not None:
            self.expiry[key] = ex
        return True

    def mset(self, mapping: Dict[str, Any]) -> bool:
        for key, value in mapping.items():
            self.data[key] = str(value)
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


def make_response(payload: Any, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    if not isinstance(payload, bytes):
        payload = json.dumps(payload).encode()
    response.content = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status} Error"
        )
    else:
        response.raise_for_status.return_value = None
    return response


@pytest.fixture
def wire_topics() -> List[Dict[str, Any]]:
    return [
        {
            "title": "Science!",
            "desc": "Because SCIENCE!",
            "questions": [
                {
                    "text": "What is fire?",
                    "answer": "1",
                    "answers": [
                        "One of the four classical elements",
                        "A magical reaction given to us by God",
                        "A band that hasn't yet been discovered",
                        "Fire! Fire! Fire! heh-heh",
                    ],
                }
            ],
        },
        {
            "title": "Mathematics",
            "desc": "Did you pass the third grade?",
            "questions": [
                {
                    "text": "What is 2+2?",
                    "answer": "1",
                    "answers": ["4", "22", "An irrational number", "Nobody knows"],
                },
                {"text": "What is 3*3?", "answer": "2", "answers": ["6", "9", "33"]},
                {"text": "What is 10/2?", "answer": "3", "answers": ["2", "20", "5"]},
            ],
        },
    ]


@pytest.fixture
def math_topic(wire_topics) -> Topic:
    return Topic.model_validate(wire_topics[1])


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def http(wire_topics) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.get.return_value = make_response(wire_topics)
    return session


@pytest.fixture
def fetcher(http) -> QuizDataFetcher:
    return QuizDataFetcher(reachability=AlwaysReachable(), http=http)


@pytest.fixture
def store(fake_redis):
    store = PreferencesStore(fake_redis)
    yield store
    store.close()


@pytest.fixture
def controller(fetcher, store):
    controller = QuizController(fetcher=fetcher, store=store)
    controller.preferences = controller.preferences.model_copy(
        update={"data_url": DATA_URL}
    )
    yield controller
    controller.scheduler.stop()
