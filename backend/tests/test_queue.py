import pytest

from coinflip.services.games import AlreadyWaiting
from coinflip.services.games.queue import WAITING, MatchQueue
from coinflip.services.games.registry import PLAYING, WAITING as STATUS_WAITING, PlayerRegistry
from coinflip.services.games.session import GameSession


@pytest.fixture()
def registry():
    registry = PlayerRegistry()
    for pid in ('p1', 'p2', 'p3', 'p4'):
        registry.get_or_create(pid)
    return registry


@pytest.fixture()
def queue(registry):
    counter = iter(range(1, 100))
    return MatchQueue(registry, lambda a, b: GameSession(f'g{next(counter)}', a, b, registry))


def test_pairs_in_arrival_order(queue):
    assert queue.try_pair('p1') is WAITING
    first = queue.try_pair('p2')
    assert queue.try_pair('p3') is WAITING
    second = queue.try_pair('p4')

    assert set(first.players) == {'p1', 'p2'}
    assert set(second.players) == {'p3', 'p4'}


def test_requester_moves_first_and_both_are_playing(queue, registry):
    queue.try_pair('p1')
    session = queue.try_pair('p2')
    assert session.current_turn == 'p2'
    assert session.other_player('p2') == 'p1'
    assert registry.get('p1').status == PLAYING
    assert registry.get('p2').status == PLAYING
    assert len(queue) == 0


def test_waiting_player_status_and_duplicate_request(queue, registry):
    queue.try_pair('p1')
    assert registry.get('p1').status == STATUS_WAITING
    with pytest.raises(AlreadyWaiting):
        queue.try_pair('p1')
    with pytest.raises(AlreadyWaiting):
        queue.enqueue('p1')
    assert queue.waiting_players() == ['p1']


def test_missing_opponent_record_requeues_requester(queue):
    queue.enqueue('p1')
    # an id with no player record slipped into the queue
    queue._queue.appendleft('ghost')
    queue.remove('p1')
    assert queue.try_pair('p2') is WAITING
    assert queue.waiting_players() == ['p2']


def test_push_front_restores_head(queue):
    queue.enqueue('p1')
    queue.push_front('p2')
    assert queue.waiting_players() == ['p2', 'p1']
