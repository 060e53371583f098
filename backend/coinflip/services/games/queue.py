import threading
from collections import deque
from typing import Callable, Union

from .errors import AlreadyWaiting
from .registry import PLAYING, WAITING as PLAYER_WAITING, PlayerRegistry
from .session import GameSession


class _Waiting:
    def __repr__(self):
        return 'WAITING'

    def to_dict(self):
        return {'waiting': True}


# Returned by try_pair when the requester was queued instead of paired
WAITING = _Waiting()


class MatchQueue:
    """First-come first-served pairing of players looking for a match."""

    def __init__(self, registry: PlayerRegistry, session_factory: Callable[[str, str], GameSession]):
        self.registry = registry
        self.session_factory = session_factory
        self._queue = deque()
        self._lock = threading.RLock()

    def __len__(self):
        return len(self._queue)

    def __contains__(self, player_id):
        return player_id in self._queue

    def waiting_players(self):
        with self._lock:
            return list(self._queue)

    def enqueue(self, player_id: str) -> None:
        with self._lock:
            if player_id in self._queue:
                raise AlreadyWaiting()
            self._queue.append(player_id)
            self.registry.set_status(player_id, PLAYER_WAITING)

    def push_front(self, player_id: str) -> None:
        with self._lock:
            if player_id in self._queue:
                return
            self._queue.appendleft(player_id)
            self.registry.set_status(player_id, PLAYER_WAITING)

    def remove(self, player_id: str) -> bool:
        with self._lock:
            try:
                self._queue.remove(player_id)
            except ValueError:
                return False
            return True

    def try_pair(self, player_id: str) -> Union[GameSession, _Waiting]:
        """Pair the requester with the longest waiting player.

        The requester always takes the first turn. With nobody waiting the
        requester is queued and WAITING is returned.
        """
        with self._lock:
            if player_id in self._queue:
                raise AlreadyWaiting()
            if not self._queue:
                self.enqueue(player_id)
                return WAITING

            opponent_id = self._queue.popleft()
            if opponent_id not in self.registry:
                self.enqueue(player_id)
                return WAITING

            session = self.session_factory(player_id, opponent_id)
            self.registry.set_status(player_id, PLAYING)
            self.registry.set_status(opponent_id, PLAYING)
            return session
