import pytest

from coinflip.services.games import NotFound
from coinflip.services.games.registry import LOBBY, PLAYING, PlayerRegistry


def test_get_or_create_is_idempotent():
    registry = PlayerRegistry()
    player = registry.get_or_create('s1', now=10)
    assert player.coins == 5
    assert player.status == LOBBY
    player.coins = 7
    again = registry.get_or_create('s1', now=20)
    assert again is player
    assert again.coins == 7


def test_unknown_player_raises_not_found():
    registry = PlayerRegistry()
    with pytest.raises(NotFound):
        registry.get('ghost')
    with pytest.raises(NotFound):
        registry.record_heartbeat('ghost', 1)
    with pytest.raises(NotFound):
        registry.set_status('ghost', PLAYING)


def test_heartbeat_reports_reconnection_once():
    registry = PlayerRegistry()
    registry.get_or_create('s1')
    assert registry.mark_disconnected('s1', 100) is True
    assert registry.mark_disconnected('s1', 200) is False
    assert registry.get('s1').disconnected_at == 100

    player, reconnected = registry.record_heartbeat('s1', 300)
    assert reconnected is True
    assert player.last_active == 300
    assert player.disconnected_at is None

    _, reconnected = registry.record_heartbeat('s1', 400)
    assert reconnected is False


def test_settlement_is_exact_and_unclamped():
    registry = PlayerRegistry()
    registry.get_or_create('a')
    registry.get_or_create('b').coins = 2
    registry.apply_settlement('a', 'b', 4)
    assert registry.get('a').coins == 9
    assert registry.get('b').coins == -2
    registry.clamp_at_zero('b')
    assert registry.get('b').coins == 0


def test_rejects_unknown_status():
    registry = PlayerRegistry()
    registry.get_or_create('a')
    with pytest.raises(ValueError):
        registry.set_status('a', 'spectating')
