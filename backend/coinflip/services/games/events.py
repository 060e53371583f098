"""Event names, topics and the push publisher used by the coordinator."""

PLAYER_JOINED = 'player-joined'
PLAYER_WAITING = 'player-waiting'
STATUS_UPDATE = 'status-update'
GAME_CREATED = 'game-created'
GAME_START = 'game-start'
BET_PLACED = 'bet-placed'
FLIP_RESULT = 'flip-result'
GAME_TIMEOUT = 'game-timeout'
PLAYER_RECONNECTED = 'player-reconnected'

LOBBY_TOPIC = 'lobby'


def game_topic(game_id: str) -> str:
    return f"game:{game_id}"


def player_topic(player_id: str) -> str:
    return f"player:{player_id}"


class SocketIONotifier:
    """Publishes events to Socket.IO rooms; one room per topic."""

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def publish(self, topic: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=topic, namespace=self.namespace)
