def _flush(sio_client):
    try:
        sio_client.get_received('/ws')
    except Exception:
        pass


def test_socket_connect_and_join_lobby(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    _flush(sio_client)

    sio_client.emit('join_lobby', {'playerId': 'alice'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' and pkt['args'][0]['room'] == 'lobby' for pkt in received)


def test_ping_pong(sio_client):
    _flush(sio_client)
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'pong' and pkt['args'][0] == {'n': 1} for pkt in received)


def test_join_unknown_game_reports_error(sio_client):
    _flush(sio_client)
    sio_client.emit('join_game', {'gameId': 'game-missing'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_lobby_receives_match_and_game_events(socket_app, sio_client):
    http = socket_app.test_client()
    sio_client.emit('join_lobby', {'playerId': 'alice'}, namespace='/ws')
    _flush(sio_client)

    http.post('/api/game/login', json={'studentId': 'alice'})
    http.post('/api/game/login', json={'studentId': 'bob'})
    http.post('/api/game/match', json={'playerId': 'bob'})
    game = http.post('/api/game/match', json={'playerId': 'alice'}).get_json()

    names = [pkt['name'] for pkt in sio_client.get_received('/ws')]
    assert 'player-joined' in names
    assert 'game-created' in names
    # alice's personal room gets the targeted start and status updates
    assert 'game-start' in names
    assert 'status-update' in names

    sio_client.emit('join_game', {'gameId': game['id']}, namespace='/ws')
    _flush(sio_client)
    http.post('/api/game/bet', json={'gameId': game['id'], 'playerId': 'alice', 'amount': 1})
    received = sio_client.get_received('/ws')
    bets = [pkt for pkt in received if pkt['name'] == 'bet-placed']
    assert bets and bets[0]['args'][0]['amount'] == 1


def test_disconnect_marks_player_disconnected(socket_app):
    from coinflip import socketio
    http = socket_app.test_client()
    http.post('/api/game/login', json={'studentId': 'dana'})

    sock = socketio.test_client(socket_app, namespace='/ws')
    sock.emit('join_lobby', {'playerId': 'dana'}, namespace='/ws')
    sock.disconnect(namespace='/ws')

    coordinator = socket_app.extensions['coinflip']
    assert coordinator.get_player('dana').disconnected_at is not None

    res = http.post('/api/game/heartbeat', json={'playerId': 'dana'})
    assert res.get_json()['disconnectedAt'] is None


def test_socket_players_are_tracked_per_app(socket_app):
    from coinflip import socketio
    sock = socketio.test_client(socket_app, namespace='/ws')
    sock.emit('join_lobby', {'playerId': 'erin'}, namespace='/ws')
    assert 'erin' in socket_app.extensions['coinflip_sockets'].values()
    sock.disconnect(namespace='/ws')
    assert socket_app.extensions['coinflip_sockets'] == {}
