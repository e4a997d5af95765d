"""Game domain services: the trivia session and its round clock.

This package contains the transport-agnostic core that socket handlers
and HTTP routes call into, keeping transport concerns separated from
core game mechanics.
"""

from .clock import RoundClock
from .session import Event, SessionResult, TriviaSession

__all__ = ['Event', 'RoundClock', 'SessionResult', 'TriviaSession']
