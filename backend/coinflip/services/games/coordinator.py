import logging
import random
import threading
import time
from typing import Dict, List, Optional

from . import events
from .errors import AlreadyWaiting, InvalidAction, InvalidBet, InvalidFlip, NotFound, NotificationFailed
from .queue import WAITING, MatchQueue
from .registry import DEFAULT_INITIAL_COINS, LOBBY, PLAYING, Player, PlayerRegistry
from .session import (
    DEFAULT_DISCONNECT_TIMEOUT_MS,
    DEFAULT_FLIP_COOLDOWN_MS,
    GameSession,
    new_session_id,
)


def now_ms() -> int:
    return int(time.time() * 1000)


class SessionCoordinator:
    """Entry point for the transport layer.

    Owns the player registry, the match queue and the map of active
    sessions. Every transition on a session runs under that session's lock;
    events are published only after the transition has been committed and
    the lock released.
    """

    def __init__(self, notifier, clock=now_ms, rng=None, logger=None, history=None,
                 initial_coins: int = DEFAULT_INITIAL_COINS,
                 flip_cooldown_ms: int = DEFAULT_FLIP_COOLDOWN_MS,
                 disconnect_timeout_ms: int = DEFAULT_DISCONNECT_TIMEOUT_MS):
        self.notifier = notifier
        self.clock = clock
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        self.history = history
        self.flip_cooldown_ms = flip_cooldown_ms
        self.disconnect_timeout_ms = disconnect_timeout_ms
        self.registry = PlayerRegistry(initial_coins=initial_coins)
        self.queue = MatchQueue(self.registry, self._new_session)
        self._sessions: Dict[str, GameSession] = {}
        self._lock = threading.RLock()
        self.sweep_running = False

    @classmethod
    def from_config(cls, config, notifier, **kwargs):
        return cls(
            notifier,
            initial_coins=int(config.get('INITIAL_COINS', DEFAULT_INITIAL_COINS)),
            flip_cooldown_ms=int(config.get('FLIP_COOLDOWN_MS', DEFAULT_FLIP_COOLDOWN_MS)),
            disconnect_timeout_ms=int(config.get('DISCONNECT_TIMEOUT_MS', DEFAULT_DISCONNECT_TIMEOUT_MS)),
            **kwargs,
        )

    def _new_session(self, initiator: str, opponent: str) -> GameSession:
        now = self.clock()
        return GameSession(
            new_session_id(now), initiator, opponent, self.registry, now=now,
            flip_cooldown_ms=self.flip_cooldown_ms,
            disconnect_timeout_ms=self.disconnect_timeout_ms,
        )

    # ---- reads ----

    def get_player(self, player_id: str) -> Player:
        return self.registry.get(player_id)

    def get_session(self, game_id: str) -> GameSession:
        session = self._sessions.get(game_id)
        if session is None:
            raise NotFound(f'Game {game_id} not found')
        return session

    def active_sessions(self) -> List[GameSession]:
        with self._lock:
            return list(self._sessions.values())

    # ---- notifications ----

    def _publish(self, topic: str, event: str, payload: dict, critical: bool = False) -> None:
        try:
            self.notifier.publish(topic, event, payload)
        except Exception:
            self.logger.exception(f"[notify-failed] topic={topic} event={event}")
            if critical:
                raise

    def _publish_status(self, player_id: str) -> None:
        player = self.registry.get(player_id)
        self._publish(events.player_topic(player_id), events.STATUS_UPDATE, {
            'playerId': player_id,
            'status': player.status,
            'coins': player.coins,
        })

    # ---- operations ----

    def login(self, player_id: str) -> Player:
        now = self.clock()
        self.registry.get_or_create(player_id, now)
        # a returning player counts as live again
        player, reconnected = self.registry.record_heartbeat(player_id, now)
        self.logger.info(f"[login] player={player_id} coins={player.coins} status={player.status}")
        self._publish(events.LOBBY_TOPIC, events.PLAYER_JOINED, player.to_dict())
        if reconnected:
            self._publish(events.LOBBY_TOPIC, events.PLAYER_RECONNECTED, {'playerId': player_id})
        return player

    def request_match(self, player_id: str):
        """Pair the player or queue them.

        Returns the new GameSession or ``WAITING``. If the new session cannot
        be announced to both players it is rolled back and
        NotificationFailed is raised.
        """
        player = self.registry.get(player_id)
        with self._lock:
            if player_id in self.queue:
                raise AlreadyWaiting()
            if player.status == PLAYING:
                raise InvalidAction('Already playing a game')
            outcome = self.queue.try_pair(player_id)
            if outcome is WAITING:
                self.logger.info(f"[queue] player={player_id} waiting={len(self.queue)}")
            else:
                self._sessions[outcome.id] = outcome

        if outcome is WAITING:
            self._publish(events.LOBBY_TOPIC, events.PLAYER_WAITING, {'playerId': player_id})
            self._publish_status(player_id)
            return WAITING

        session = outcome
        try:
            self._publish(events.LOBBY_TOPIC, events.GAME_CREATED, session.to_dict(), critical=True)
            for pid in session.players:
                self._publish(events.player_topic(pid), events.GAME_START, session.to_dict(), critical=True)
        except Exception:
            self._rollback_session(session)
            raise NotificationFailed()

        self.logger.info(
            f"[match] game={session.id} initiator={session.initiator} opponent={session.opponent}"
        )
        for pid in session.players:
            self._publish_status(pid)
        return session

    def _rollback_session(self, session: GameSession) -> None:
        with self._lock:
            self._sessions.pop(session.id, None)
            self.registry.set_status(session.initiator, LOBBY)
            self.queue.push_front(session.opponent)
        self.logger.warning(f"[match-rollback] game={session.id}")

    def bet(self, game_id: str, player_id: str, amount: int) -> dict:
        session = self.get_session(game_id)
        self.registry.get(player_id)
        with session.lock:
            if session.is_complete:
                raise InvalidBet()
            payload = session.place_bet(player_id, amount, self.clock())
        self.logger.info(f"[bet] game={game_id} player={player_id} amount={amount}")
        self._publish(events.game_topic(game_id), events.BET_PLACED, payload)
        return payload

    def flip(self, game_id: str, player_id: str) -> dict:
        session = self.get_session(game_id)
        self.registry.get(player_id)
        with session.lock:
            if session.is_complete:
                raise InvalidFlip()
            now = self.clock()
            outcome = session.flip(player_id, now, self.rng)
            payload = session.flip_payload(outcome)
            if outcome.complete:
                self._discard(session)

        self.logger.info(
            f"[flip] game={game_id} player={player_id} result={outcome.result} status={session.status}"
        )
        self._publish(events.game_topic(game_id), events.FLIP_RESULT, payload)
        if outcome.complete:
            self._finished(session, outcome.winner_id, outcome.loser_id, 'bust', now)
        return payload

    def heartbeat(self, player_id: str) -> Player:
        player, reconnected = self.registry.record_heartbeat(player_id, self.clock())
        if reconnected:
            self.logger.info(f"[reconnect] player={player_id}")
            self._publish(events.LOBBY_TOPIC, events.PLAYER_RECONNECTED, {'playerId': player_id})
        return player

    def disconnect(self, player_id: str) -> bool:
        marked = self.registry.mark_disconnected(player_id, self.clock())
        if marked:
            self.logger.info(f"[disconnect] player={player_id}")
            self._leave_queue(player_id)
        return marked

    def _leave_queue(self, player_id: str) -> None:
        # a disconnected player must not be handed out as an opponent
        with self._lock:
            if not self.queue.remove(player_id):
                return
            self.registry.set_status(player_id, LOBBY)
        self.logger.info(f"[dequeue] player={player_id}")
        self._publish_status(player_id)

    def sweep(self, now: Optional[int] = None) -> List[GameSession]:
        """Forfeit idle sessions and flag silent players as disconnected.

        Returns the sessions that timed out during this pass.
        """
        now = self.clock() if now is None else now
        timed_out = []
        for session in self.active_sessions():
            with session.lock:
                winner = session.check_timeout(now)
                if winner is None:
                    continue
                self._discard(session)
            loser = session.other_player(winner)
            timed_out.append(session)
            self.logger.info(f"[timeout] game={session.id} winner={winner} forfeited={loser}")
            self._publish(events.game_topic(session.id), events.GAME_TIMEOUT, {
                'gameId': session.id,
                'winner': winner,
                'loser': loser,
            })
            self._finished(session, winner, loser, 'timeout', now)

        for player in self.registry:
            if player.disconnected_at is None and now - player.last_active > self.disconnect_timeout_ms:
                self.registry.mark_disconnected(player.id, now)
                self.logger.info(f"[liveness] player={player.id} marked disconnected")
                self._leave_queue(player.id)
        return timed_out

    def _discard(self, session: GameSession) -> None:
        with self._lock:
            self._sessions.pop(session.id, None)

    def _finished(self, session: GameSession, winner_id: str, loser_id: str, reason: str, now: int) -> None:
        for pid in session.players:
            self._publish_status(pid)
        if self.history is None:
            return
        try:
            self.history.record(
                game_id=session.id,
                winner_id=winner_id,
                loser_id=loser_id,
                reason=reason,
                winner_coins=self.registry.get(winner_id).coins,
                loser_coins=self.registry.get(loser_id).coins,
                finished_at=now,
            )
        except Exception:
            self.logger.exception(f"[history-failed] game={session.id}")
