import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from showdown.models import (
    DEFAULT_MAX_ATTEMPTS,
    REASON_TIMEOUT,
    REASON_WIN,
    RESULT_CORRECT,
    RESULT_WRONG,
    Player,
    RoundContent,
    RoundOutcome,
)
from .clock import RoundClock

logger = logging.getLogger(__name__)

EVENT_PLAYERS = 'players:update'
EVENT_STATE = 'game:state'
EVENT_MESSAGE = 'system:message'
EVENT_TIMER = 'timer:update'
EVENT_ANSWER_RESULT = 'answer:result'


@dataclass
class Event:
    name: str
    payload: Any
    to: Optional[str] = None  # None broadcasts to every participant


@dataclass
class SessionResult:
    reply: Optional[Dict[str, Any]] = None
    events: List[Event] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.reply and self.reply.get('ok'))


def _ok():
    return {'ok': True}


def _reject(op, reason):
    logger.info(f"[reject] op={op} reason={reason!r}")
    return {'error': reason}


class TriviaSession:
    """The single shared trivia showdown.

    Every public operation runs under one re-entrant lock and returns a
    SessionResult: the reply for the caller plus the events the transport
    has to deliver. Clock callbacks go through the same lock and hand their
    events to ``publish``.

    Round sub-machine: idle (no question) -> ready (question set) ->
    active (clock running) -> resolved (outcome recorded) -> ready/idle.
    """

    def __init__(self, clock: Optional[RoundClock] = None,
                 publish: Optional[Callable[[List[Event]], None]] = None,
                 min_players: int = 3,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS,
                 round_duration: int = 60,
                 correct_points: int = 10,
                 rotate_master_on_round_end: bool = False):
        self.clock = clock or RoundClock(default_duration=round_duration)
        self._publish = publish or (lambda events: None)
        self.min_players = min_players
        self.max_attempts = max_attempts
        self.round_duration = round_duration
        self.correct_points = correct_points
        self.rotate_master_on_round_end = rotate_master_on_round_end

        self._lock = threading.RLock()
        self._events: Optional[List[Event]] = None
        self._round_token = 0

        self._players: Dict[str, Player] = {}
        self.master_id: Optional[str] = None
        self.in_progress = False
        self.content: Optional[RoundContent] = None
        self.outcome: Optional[RoundOutcome] = None

    # ---- public operations ----

    def join(self, player_id, name, wants_master=False) -> SessionResult:
        return self._run(self._join, player_id, name, bool(wants_master))

    def leave(self, player_id) -> SessionResult:
        return self._run(self._leave, player_id)

    def set_question(self, by_id, question, answer) -> SessionResult:
        return self._run(self._set_question, by_id, question, answer)

    def start_round(self, by_id) -> SessionResult:
        return self._run(self._start_round, by_id)

    def submit_answer(self, player_id, submission) -> SessionResult:
        return self._run(self._submit_answer, player_id, submission)

    def close(self) -> None:
        with self._lock:
            self._round_token += 1
            self.clock.stop()

    # ---- snapshots ----

    def get_player(self, player_id) -> Optional[Player]:
        with self._lock:
            return self._players.get(player_id)

    def players(self):
        with self._lock:
            return [p.to_dict() for p in self._players.values()]

    def state(self):
        with self._lock:
            return {
                'inProgress': self.in_progress,
                'currentQuestion': self.content.to_public_dict() if self.content else None,
                'players': [p.to_dict() for p in self._players.values()],
                'playerCount': len(self._players),
                'hasMaster': bool(self.master_id),
                'timeLeft': self.clock.remaining(),
                'masterId': self.master_id,
                'result': self.outcome.to_dict() if self.outcome else None,
            }

    # ---- serialization ----

    def _run(self, operation, *args) -> SessionResult:
        with self._lock:
            if self._events is not None:
                # Re-entered from a synchronous clock callback; the outer
                # operation collects the events.
                return SessionResult(operation(*args), [])
            self._events = []
            try:
                reply = operation(*args)
                return SessionResult(reply, self._events)
            finally:
                self._events = None

    def _emit(self, name, payload, to=None) -> None:
        self._events.append(Event(name, payload, to))

    def _message(self, text) -> None:
        self._emit(EVENT_MESSAGE, text)

    def _emit_players(self) -> None:
        self._emit(EVENT_PLAYERS, [p.to_dict() for p in self._players.values()])

    def _broadcast_state(self) -> None:
        self._emit(EVENT_STATE, self.state())

    # ---- transitions ----

    def _join(self, player_id, name, wants_master):
        if self.in_progress:
            return _reject('join', 'Cannot join while a game is in progress.')
        if wants_master and self.master_id and self.master_id != player_id:
            return _reject('join', 'A game master already exists for this session.')

        # A duplicate id replaces the earlier entry; its master role survives
        is_master = self.master_id == player_id or (wants_master and not self.master_id)
        player = Player(player_id, name, is_master=is_master)
        player.attempts_left = self.max_attempts
        self._players[player_id] = player
        if is_master:
            self.master_id = player_id

        logger.info(f"[join] player={player_id} name={player.name!r} master={is_master} players={len(self._players)}")
        self._emit_players()
        self._broadcast_state()
        self._message(f'{player.name} joined the session.')
        return _ok()

    def _leave(self, player_id):
        player = self._players.pop(player_id, None)

        if player_id is not None and player_id == self.master_id:
            logger.info(f"[leave] master={player_id} left, resetting round")
            self.master_id = None
            self.in_progress = False
            self.content = None
            self.outcome = None
            self._round_token += 1
            self.clock.stop()
            self._message('Game master left. Session reset.')
            self._promote_next_master()
        elif player:
            logger.info(f"[leave] player={player_id} players={len(self._players)}")
            self._message(f'{player.name} left the session.')

        if not self._players:
            self._reset()
            self._message('Session deleted (no players).')

        self._emit_players()
        self._broadcast_state()
        return None

    def _set_question(self, by_id, question, answer):
        if by_id is None or by_id != self.master_id:
            return _reject('set_question', 'Only the game master can post questions.')
        if self.in_progress:
            return _reject('set_question', 'Cannot change the question while a game is in progress.')
        if not question or not str(answer or '').strip():
            return _reject('set_question', 'Question and answer are required.')

        self.content = RoundContent(question, answer)
        self.outcome = None
        logger.info(f"[question-set] by={by_id}")
        self._broadcast_state()
        self._message(f'Question ready: {question}')
        return _ok()

    def _start_round(self, by_id):
        if by_id is None or by_id != self.master_id:
            return _reject('start_round', 'Only the game master can start the session.')
        if len(self._players) < self.min_players:
            return _reject('start_round', f'Need at least {self.min_players} players to start the session.')
        if self.in_progress:
            return _reject('start_round', 'Game already in progress.')
        if not self.content:
            return _reject('start_round', 'Set a question before starting the game.')

        self.outcome = None
        self.in_progress = True
        for p in self._players.values():
            p.reset_for_new_round(self.max_attempts)
        self.clock.stop()
        self._round_token += 1
        token = self._round_token

        logger.info(f"[round-start] players={len(self._players)} duration={self.round_duration}s")
        self._broadcast_state()
        self._message('Game started by the game master.')

        self.clock.start(
            self.round_duration,
            lambda remaining: self._clock_callback(self._tick, token, remaining),
            lambda: self._clock_callback(self._timeout, token),
        )
        return _ok()

    def _submit_answer(self, player_id, submission):
        player = self._players.get(player_id)
        if not player or not self.content or not self.in_progress:
            return None
        if self.outcome:
            return None
        if player.attempts_left <= 0:
            return None

        submitted = str(submission or '').strip()
        player.last_answer = submitted
        correct = self.content.is_correct(submitted)
        player.last_result = RESULT_CORRECT if correct else RESULT_WRONG
        if correct:
            player.score += self.correct_points
            logger.info(f"[answer] player={player_id} correct=True score={player.score}")
            self._end_round(winner=player, reason=REASON_WIN)
        else:
            player.attempts_left = max(0, player.attempts_left - 1)
            logger.info(f"[answer] player={player_id} correct=False attempts_left={player.attempts_left}")

        self._emit_players()
        self._emit(EVENT_ANSWER_RESULT, {
            'correct': correct,
            'correctAnswer': self.content.answer,
            'attemptsLeft': player.attempts_left,
            'gameOver': self.outcome is not None,
        }, to=player_id)
        return None

    # ---- clock re-entry ----

    def _clock_callback(self, operation, *args):
        result = self._run(operation, *args)
        if result.events:
            self._publish(result.events)

    def _tick(self, token, remaining):
        if token != self._round_token or not self.in_progress:
            logger.debug(f"[tick-drop] token={token} current={self._round_token}")
            return None
        self._emit(EVENT_TIMER, remaining)
        return None

    def _timeout(self, token):
        if token != self._round_token or not self.in_progress or self.outcome:
            logger.debug(f"[timeout-drop] token={token} current={self._round_token}")
            return None
        logger.info(f"[round-timeout] token={token}")
        self._end_round(winner=None, reason=REASON_TIMEOUT)
        return None

    # ---- internals ----

    def _end_round(self, winner: Optional[Player], reason: str) -> None:
        answer = self.content.answer if self.content else None
        self.in_progress = False
        self.outcome = RoundOutcome(
            winner_id=winner.id if winner else None,
            winner_name=winner.name if winner else None,
            answer=answer,
            reason=reason,
        )
        self.clock.stop()
        logger.info(f"[round-end] reason={reason} winner={self.outcome.winner_id}")

        self._broadcast_state()
        if self.outcome.winner_name:
            self._message(f'{self.outcome.winner_name} got the correct answer!')
        elif answer:
            self._message(f'Time is up! Correct answer: {answer}')
        else:
            self._message('Time is up!')

        if self.rotate_master_on_round_end:
            self._promote_next_master()

    def _promote_next_master(self) -> None:
        if not self._players:
            self.master_id = None
            return

        candidates = list(self._players.values())
        nxt = next((p for p in candidates if not p.is_master), candidates[0])

        current = self._players.get(self.master_id) if self.master_id else None
        if current:
            current.is_master = False
        self.master_id = nxt.id
        nxt.is_master = True

        logger.info(f"[promote] master={nxt.id} name={nxt.name!r}")
        self._message(f'{nxt.name} is now the Game Master.')
        self._emit_players()
        self._broadcast_state()

    def _reset(self) -> None:
        logger.info("[reset] session emptied")
        self.master_id = None
        self.in_progress = False
        self.content = None
        self.outcome = None
        self._round_token += 1
        self.clock.stop()
