import itertools
import threading
from typing import Optional, Tuple

from .errors import CooldownActive, InsufficientCoins, InvalidBet, InvalidFlip
from .registry import LOBBY, PlayerRegistry


BETTING = 'betting'
FLIPPING = 'flipping'
COMPLETE = 'complete'

HEADS = 'heads'
TAILS = 'tails'

DEFAULT_FLIP_COOLDOWN_MS = 2000
DEFAULT_DISCONNECT_TIMEOUT_MS = 30000

_session_counter = itertools.count(1)


def new_session_id(now: int) -> str:
    # the counter keeps ids distinct for sessions created in the same millisecond
    return f"game-{now}-{next(_session_counter)}"


class FlipOutcome:
    def __init__(self, session, player_id, result, winner_id, loser_id):
        self.session = session
        self.player_id = player_id
        self.result = result
        self.winner_id = winner_id
        self.loser_id = loser_id

    @property
    def complete(self) -> bool:
        return self.session.status == COMPLETE


class GameSession:
    """State machine for one paired match.

    betting -> flipping -> betting | complete

    Players are referenced by id only; balances live in the shared
    PlayerRegistry. Callers must hold ``lock`` around every transition.
    The session never schedules anything itself: ``check_timeout`` is driven
    by the coordinator's sweep.
    """

    def __init__(self, session_id: str, initiator: str, opponent: str, registry: PlayerRegistry,
                 now: int = 0, flip_cooldown_ms: int = DEFAULT_FLIP_COOLDOWN_MS,
                 disconnect_timeout_ms: int = DEFAULT_DISCONNECT_TIMEOUT_MS):
        if initiator == opponent:
            raise ValueError('a session needs two distinct players')
        self.id = session_id
        self.players: Tuple[str, str] = (initiator, opponent)
        self.current_turn = initiator
        self.bet_amount = 0
        self.status = BETTING
        self.created_at = now
        self.last_action = now
        self.flip_cooldown_ms = flip_cooldown_ms
        self.disconnect_timeout_ms = disconnect_timeout_ms
        self.registry = registry
        self.lock = threading.Lock()

    @property
    def initiator(self) -> str:
        return self.players[0]

    @property
    def opponent(self) -> str:
        return self.players[1]

    @property
    def is_complete(self) -> bool:
        return self.status == COMPLETE

    def other_player(self, player_id: str) -> str:
        if player_id == self.players[0]:
            return self.players[1]
        if player_id == self.players[1]:
            return self.players[0]
        raise ValueError(f'{player_id} is not part of {self.id}')

    def place_bet(self, player_id: str, amount: int, now: int) -> dict:
        if self.status != BETTING or player_id != self.current_turn:
            raise InvalidBet()
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 1:
            raise InvalidBet('Bet must be a whole number of at least 1')
        if amount > self.registry.get(player_id).coins:
            raise InsufficientCoins()

        self.bet_amount = amount
        self.status = FLIPPING
        self.last_action = now
        return {'gameId': self.id, 'playerId': player_id, 'amount': amount}

    def flip(self, player_id: str, now: int, rng) -> FlipOutcome:
        if self.status != FLIPPING or player_id != self.current_turn:
            raise InvalidFlip()
        elapsed = now - self.registry.get(player_id).last_flip
        if elapsed < self.flip_cooldown_ms:
            raise CooldownActive(self.flip_cooldown_ms - elapsed)

        opponent_id = self.other_player(player_id)
        result = HEADS if rng.random() < 0.5 else TAILS
        if result == HEADS:
            winner_id, loser_id = player_id, opponent_id
        else:
            winner_id, loser_id = opponent_id, player_id

        self.registry.apply_settlement(winner_id, loser_id, self.bet_amount)
        self.registry.record_flip(player_id, now)
        self.last_action = now

        if self.registry.get(loser_id).coins <= 0 or self.registry.get(winner_id).coins <= 0:
            self.registry.clamp_at_zero(loser_id)
            self._finish()
        else:
            self.current_turn = opponent_id
            self.status = BETTING
            self.bet_amount = 0
        return FlipOutcome(self, player_id, result, winner_id, loser_id)

    def check_timeout(self, now: int) -> Optional[str]:
        """Forfeit the player on turn after too long without an action.

        Returns the winner's id when the session timed out, otherwise None.
        """
        if self.status == COMPLETE:
            return None
        if now - self.last_action <= self.disconnect_timeout_ms:
            return None
        winner = self.other_player(self.current_turn)
        self._finish()
        return winner

    def _finish(self) -> None:
        self.status = COMPLETE
        for player_id in self.players:
            self.registry.set_status(player_id, LOBBY)

    def flip_payload(self, outcome: FlipOutcome) -> dict:
        opponent_id = self.other_player(outcome.player_id)
        payload = {
            'gameId': self.id,
            'playerId': outcome.player_id,
            'result': outcome.result,
            'playerCoins': self.registry.get(outcome.player_id).coins,
            'opponentCoins': self.registry.get(opponent_id).coins,
            'gameStatus': self.status,
        }
        if outcome.complete:
            payload['winner'] = outcome.winner_id
        else:
            payload['nextTurn'] = self.current_turn
        return payload

    def to_dict(self):
        return {
            'id': self.id,
            'players': list(self.players),
            'currentTurn': self.current_turn,
            'betAmount': self.bet_amount,
            'status': self.status,
            'lastAction': self.last_action,
            'createdAt': self.created_at,
        }
