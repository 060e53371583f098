"""Game domain services: players, matchmaking, sessions and timers.

This package holds the coin flip core. HTTP routes and socket handlers
call into SessionCoordinator and never touch players or sessions
directly, keeping transport concerns separated from game mechanics.
"""

from .coordinator import SessionCoordinator, now_ms
from .errors import (
    AlreadyWaiting,
    CooldownActive,
    GameError,
    InsufficientCoins,
    InvalidAction,
    InvalidBet,
    InvalidFlip,
    NotFound,
    NotificationFailed,
)
from .queue import WAITING
