NAMESPACE = '/ws'


def _events(sio, name):
    return [e['args'][0] for e in sio.get_received(NAMESPACE) if e['name'] == name]


def _join(sio, name, master=False):
    return sio.emit('player:join', {'name': name, 'isMaster': master}, namespace=NAMESPACE, callback=True)


def _seat(make_sio_client):
    host, p1, p2 = make_sio_client(), make_sio_client(), make_sio_client()
    assert _join(host, 'Alice', True) == {'ok': True}
    assert _join(p1, 'Bob') == {'ok': True}
    assert _join(p2, 'Cara') == {'ok': True}
    for sio in (host, p1, p2):
        sio.get_received(NAMESPACE)  # flush
    return host, p1, p2


def test_socket_connect(sio_client):
    assert sio_client.is_connected(NAMESPACE)
    received = sio_client.get_received(NAMESPACE)
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_join_broadcasts_to_everyone(make_sio_client):
    host, guest = make_sio_client(), make_sio_client()
    _join(host, 'Alice', True)
    host.get_received(NAMESPACE)  # flush
    guest.get_received(NAMESPACE)

    assert _join(guest, 'Bob') == {'ok': True}
    received = host.get_received(NAMESPACE)
    names = [e['name'] for e in received]
    assert 'players:update' in names
    assert 'game:state' in names
    messages = [e['args'][0] for e in received if e['name'] == 'system:message']
    assert messages == ['Bob joined the session.']


def test_rejected_join_acks_error_and_sends_state(make_sio_client):
    host, rival = make_sio_client(), make_sio_client()
    _join(host, 'Alice', True)
    rival.get_received(NAMESPACE)

    ack = _join(rival, 'Eve', True)
    assert ack == {'error': 'A game master already exists for this session.'}
    states = _events(rival, 'game:state')
    assert len(states) == 1
    assert states[0]['playerCount'] == 1


def test_non_master_cannot_start(make_sio_client):
    host, p1, p2 = _seat(make_sio_client)
    ack = p1.emit('game:start', {}, namespace=NAMESPACE, callback=True)
    assert ack == {'error': 'Only the game master can start the session.'}
    ack = host.emit('game:start', {}, namespace=NAMESPACE, callback=True)
    assert ack == {'error': 'Set a question before starting the game.'}


def test_full_round_over_sockets(client, make_sio_client):
    host, p1, p2 = _seat(make_sio_client)

    ack = host.emit('question:create', {'question': 'Capital of France?', 'answer': 'Paris'},
                    namespace=NAMESPACE, callback=True)
    assert ack == {'ok': True}
    assert 'Question ready: Capital of France?' in _events(p1, 'system:message')

    ack = host.emit('game:start', {}, namespace=NAMESPACE, callback=True)
    assert ack == {'ok': True}
    received = p2.get_received(NAMESPACE)
    assert 30 in [e['args'][0] for e in received if e['name'] == 'timer:update']
    assert 'Game started by the game master.' in [e['args'][0] for e in received if e['name'] == 'system:message']

    # Wrong answer: private result only for the submitter
    p1.emit('answer:submit', {'answer': 'Lyon'}, namespace=NAMESPACE)
    results = _events(p1, 'answer:result')
    assert results[-1]['correct'] is False
    assert results[-1]['attemptsLeft'] == 2
    assert _events(p2, 'answer:result') == []

    p2.emit('answer:submit', {'answer': ' paris '}, namespace=NAMESPACE)
    results = _events(p2, 'answer:result')
    assert results[-1]['correct'] is True
    assert results[-1]['gameOver'] is True
    assert 'Cara got the correct answer!' in _events(host, 'system:message')

    # Late correct answer is ignored
    p1.emit('answer:submit', {'answer': 'Paris'}, namespace=NAMESPACE)
    assert _events(p1, 'answer:result') == []

    state = client.get('/api/session/state').get_json()
    assert state['inProgress'] is False
    assert state['result']['reason'] == 'win'
    assert state['result']['winnerName'] == 'Cara'
    assert state['result']['answer'] == 'Paris'
    scores = {p['name']: p['score'] for p in state['players']}
    assert scores == {'Alice': 0, 'Bob': 0, 'Cara': 10}


def test_master_disconnect_promotes_next_player(client, make_sio_client):
    host, p1, p2 = _seat(make_sio_client)
    host.emit('question:create', {'question': 'Q?', 'answer': 'A'}, namespace=NAMESPACE, callback=True)
    host.emit('game:start', {}, namespace=NAMESPACE, callback=True)
    p1.get_received(NAMESPACE)

    host.disconnect(namespace=NAMESPACE)
    messages = _events(p1, 'system:message')
    assert messages[0] == 'Game master left. Session reset.'
    assert messages[1] == 'Bob is now the Game Master.'

    state = client.get('/api/session/state').get_json()
    assert state['playerCount'] == 2
    assert state['inProgress'] is False
    assert state['currentQuestion'] is None
    assert [p['name'] for p in state['players'] if p['isMaster']] == ['Bob']


def test_everyone_leaving_deletes_session(client, make_sio_client):
    host, guest = make_sio_client(), make_sio_client()
    _join(host, 'Alice', True)
    _join(guest, 'Bob')
    guest.disconnect(namespace=NAMESPACE)
    host.disconnect(namespace=NAMESPACE)

    state = client.get('/api/session/state').get_json()
    assert state['playerCount'] == 0
    assert state['masterId'] is None


def test_join_with_non_dict_payload_uses_default_name(client, make_sio_client):
    sio = make_sio_client()
    assert sio.emit('player:join', 'Bob', namespace=NAMESPACE, callback=True) == {'ok': True}
    players = client.get('/api/session/players').get_json()
    assert [p['name'] for p in players] == ['Player']


def test_join_with_missing_payload(client, make_sio_client):
    sio = make_sio_client()
    assert sio.emit('player:join', None, namespace=NAMESPACE, callback=True) == {'ok': True}
    assert client.get('/api/session/state').get_json()['playerCount'] == 1


def test_malformed_question_and_answer_payloads_are_ignored(client, make_sio_client):
    host, p1, p2 = _seat(make_sio_client)
    ack = host.emit('question:create', ['Q?', 'A'], namespace=NAMESPACE, callback=True)
    assert ack == {'error': 'Question and answer are required.'}

    host.emit('question:create', {'question': 'Capital of France?', 'answer': 'Paris'},
              namespace=NAMESPACE, callback=True)
    host.emit('game:start', {}, namespace=NAMESPACE, callback=True)
    p1.get_received(NAMESPACE)

    p1.emit('answer:submit', ['Paris'], namespace=NAMESPACE)
    p1.emit('answer:submit', 'Paris', namespace=NAMESPACE)
    results = _events(p1, 'answer:result')
    assert [r['correct'] for r in results] == [False, False]
    assert results[-1]['attemptsLeft'] == 1

    state = client.get('/api/session/state').get_json()
    assert state['inProgress'] is True
    assert state['result'] is None
