from typing import List, Optional

from .errors import InvalidStateTransition
from .models import AnswerRecord, Question, SessionData, SessionState, Topic


def score_message(score: int, total: int) -> str:
    """End-of-quiz feedback for `score` correct answers out of `total`."""
    if total <= 0:
        return "Keep practicing!"
    p = score / total
    if p == 1.0:
        return "Perfect!"
    if 0.9 <= p < 1.0:
        return "Almost perfect!"
    if 0.7 <= p < 0.9:
        return "Great job!"
    if 0.5 <= p < 0.7:
        return "Not bad!"
    return "Keep practicing!"


class QuizSession:
    """Linear walk through one topic: answer, review, advance, finish.

    All state lives in a SessionData so the session can be stored and
    rebuilt between requests.
    """

    def __init__(self, topic: Topic):
        state = SessionState.ANSWERING if topic.questions else SessionState.FINISHED
        self.data = SessionData(topic=topic, state=state)

    @classmethod
    def from_data(cls, data: SessionData) -> "QuizSession":
        session = cls.__new__(cls)
        session.data = data
        return session

    # --- Read-only views ---
    @property
    def topic(self) -> Topic:
        return self.data.topic

    @property
    def state(self) -> SessionState:
        return self.data.state

    @property
    def current_index(self) -> int:
        return self.data.current_index

    @property
    def score(self) -> int:
        return self.data.score

    @property
    def total_questions(self) -> int:
        return len(self.data.topic.questions)

    @property
    def recorded_answers(self) -> List[Optional[str]]:
        return list(self.data.recorded_answers)

    @property
    def is_finished(self) -> bool:
        return self.data.state is SessionState.FINISHED

    @property
    def current_question(self) -> Optional[Question]:
        if self.is_finished:
            return None
        return self.data.topic.questions[self.data.current_index]

    @property
    def progress(self) -> float:
        if self.is_finished or not self.total_questions:
            return 1.0
        return self.data.current_index / self.total_questions

    @property
    def score_text(self) -> str:
        return score_message(self.data.score, self.total_questions)

    # --- Transitions ---
    def submit_answer(self, choice_text: str) -> AnswerRecord:
        self._require(SessionState.ANSWERING, "submit an answer")
        question = self.current_question
        index = self.data.current_index

        answers = self.data.recorded_answers
        while len(answers) <= index:
            answers.append(None)
        answers[index] = choice_text

        is_correct = choice_text == question.correct_answer
        if is_correct:
            self.data.score += 1
        self.data.state = SessionState.REVIEWING

        return AnswerRecord(
            question=question.text,
            user_answer=choice_text,
            correct_answer=question.correct_answer,
            is_correct=is_correct,
        )

    def submit_choice(self, option_index: int) -> AnswerRecord:
        self._require(SessionState.ANSWERING, "submit an answer")
        options = self.current_question.answers
        if not 0 <= option_index < len(options):
            raise ValueError(f"option {option_index} out of range")
        return self.submit_answer(options[option_index])

    def advance(self) -> SessionState:
        self._require(SessionState.REVIEWING, "advance")
        if self.data.current_index + 1 < self.total_questions:
            self.data.current_index += 1
            self.data.state = SessionState.ANSWERING
        else:
            self.data.state = SessionState.FINISHED
        return self.data.state

    def review(self) -> AnswerRecord:
        """Feedback for the question currently under review."""
        self._require(SessionState.REVIEWING, "review")
        question = self.current_question
        user_answer = self.data.recorded_answers[self.data.current_index]
        return AnswerRecord(
            question=question.text,
            user_answer=user_answer,
            correct_answer=question.correct_answer,
            is_correct=user_answer == question.correct_answer,
        )

    def _require(self, expected: SessionState, action: str) -> None:
        if self.data.state is not expected:
            raise InvalidStateTransition(
                f"Cannot {action} while {self.data.state.value}"
            )
