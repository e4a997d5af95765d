from dataclasses import dataclass
from typing import Optional

DEFAULT_PLAYER_NAME = 'Player'
DEFAULT_MAX_ATTEMPTS = 3

RESULT_CORRECT = 'correct'
RESULT_WRONG = 'wrong'

REASON_WIN = 'win'
REASON_TIMEOUT = 'timeout'


def normalize_name(name) -> str:
    """Trim a display name, falling back to the default for blank input."""
    return str(name or DEFAULT_PLAYER_NAME).strip() or DEFAULT_PLAYER_NAME


@dataclass
class Player:
    id: str
    name: str
    is_master: bool = False
    score: int = 0
    attempts_left: int = DEFAULT_MAX_ATTEMPTS
    last_answer: Optional[str] = None
    last_result: Optional[str] = None  # correct, wrong

    def __post_init__(self):
        self.name = normalize_name(self.name)

    def reset_for_new_round(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        self.attempts_left = max_attempts
        self.last_answer = None
        self.last_result = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'score': self.score,
            'lastAnswer': self.last_answer,
            'lastResult': self.last_result,
            'isMaster': self.is_master,
        }


class RoundContent:
    """Question/answer pair for one round.

    The answer is trimmed once here; comparisons ignore case and
    surrounding whitespace on both sides.
    """

    __slots__ = ('_question', '_answer')

    def __init__(self, question: str, answer: str):
        if not question:
            raise ValueError('question is required')
        answer = str(answer or '').strip()
        if not answer:
            raise ValueError('answer is required')
        self._question = question
        self._answer = answer

    @property
    def question(self) -> str:
        return self._question

    @property
    def answer(self) -> str:
        return self._answer

    def is_correct(self, submission) -> bool:
        return self._answer.strip().lower() == str(submission or '').strip().lower()

    def to_public_dict(self):
        # Never include the answer here, this goes out to every client
        return {'prompt': self._question}

    def __repr__(self):
        return f'RoundContent(question={self._question!r})'


@dataclass(frozen=True)
class RoundOutcome:
    winner_id: Optional[str]
    winner_name: Optional[str]
    answer: Optional[str]
    reason: str = REASON_TIMEOUT  # win, timeout

    def to_dict(self):
        return {
            'winnerId': self.winner_id,
            'winnerName': self.winner_name,
            'answer': self.answer,
            'reason': self.reason,
        }
