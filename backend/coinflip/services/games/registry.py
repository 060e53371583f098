import threading
from typing import Dict, Optional, Tuple

from .errors import NotFound


LOBBY = 'lobby'
WAITING = 'waiting'
PLAYING = 'playing'
PLAYER_STATUSES = (LOBBY, WAITING, PLAYING)

DEFAULT_INITIAL_COINS = 5


class Player:
    def __init__(self, player_id: str, coins: int, now: int = 0):
        self.id = player_id
        self.coins = coins
        self.status = LOBBY
        self.last_active = now
        self.last_flip = 0
        self.disconnected_at: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.id,
            'coins': self.coins,
            'status': self.status,
            'lastActive': self.last_active,
            'lastFlip': self.last_flip,
            'disconnectedAt': self.disconnected_at,
        }


class PlayerRegistry:
    """Sole owner of Player records.

    Records are created on first login and live for the whole process.
    Each player has its own lock so two sessions can settle concurrently
    as long as they touch different players.
    """

    def __init__(self, initial_coins: int = DEFAULT_INITIAL_COINS):
        self.initial_coins = initial_coins
        self._players: Dict[str, Player] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()

    def __contains__(self, player_id):
        return player_id in self._players

    def __iter__(self):
        with self._lock:
            return iter(list(self._players.values()))

    def get_or_create(self, player_id: str, now: int = 0) -> Player:
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                player = Player(player_id, self.initial_coins, now)
                self._players[player_id] = player
                self._locks[player_id] = threading.Lock()
            return player

    def get(self, player_id: str) -> Player:
        player = self._players.get(player_id)
        if player is None:
            raise NotFound(f'Player {player_id} not found')
        return player

    def _player_lock(self, player_id: str) -> threading.Lock:
        self.get(player_id)
        return self._locks[player_id]

    def record_heartbeat(self, player_id: str, now: int) -> Tuple[Player, bool]:
        """Refresh liveness. The flag is True when this clears a disconnect."""
        with self._player_lock(player_id):
            player = self._players[player_id]
            player.last_active = now
            reconnected = player.disconnected_at is not None
            player.disconnected_at = None
            return player, reconnected

    def mark_disconnected(self, player_id: str, now: int) -> bool:
        with self._player_lock(player_id):
            player = self._players[player_id]
            if player.disconnected_at is not None:
                return False
            player.disconnected_at = now
            return True

    def set_status(self, player_id: str, status: str) -> None:
        if status not in PLAYER_STATUSES:
            raise ValueError(f'unknown player status {status!r}')
        with self._player_lock(player_id):
            self._players[player_id].status = status

    def record_flip(self, player_id: str, now: int) -> None:
        with self._player_lock(player_id):
            self._players[player_id].last_flip = now

    def apply_settlement(self, winner_id: str, loser_id: str, amount: int) -> None:
        first, second = sorted((winner_id, loser_id))
        with self._player_lock(first), self._player_lock(second):
            self._players[winner_id].coins += amount
            self._players[loser_id].coins -= amount

    def clamp_at_zero(self, player_id: str) -> None:
        with self._player_lock(player_id):
            player = self._players[player_id]
            if player.coins < 0:
                player.coins = 0
