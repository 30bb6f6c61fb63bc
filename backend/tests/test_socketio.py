from conftest import payloads


def setup_room(make_client, deck='single', names=('A', 'B', 'C')):
    """Create room r1 with the first name as host; return clients and ids by name."""
    clients = {name: make_client() for name in names}
    host = clients[names[0]]
    host.emit('createRoom', {'roomId': 'r1', 'playerName': names[0], 'deckName': deck})
    for name in names[1:]:
        clients[name].emit('joinRoom', {'roomId': 'r1', 'playerName': name})
    players = payloads(host, 'updatePlayers')[-1]
    ids = {p['name']: p['id'] for p in players}
    for c in clients.values():
        c.get_received()
    return clients, ids


def test_socket_connect_and_list_rooms(make_client):
    sio_client = make_client()
    assert sio_client.is_connected()
    sio_client.get_received()

    sio_client.emit('getRooms')
    assert payloads(sio_client, 'roomsList') == [[]]


def test_create_room_broadcasts_room_list(make_client, registry):
    watcher = make_client()
    host = make_client()
    host.emit('createRoom', {'roomId': 'r1', 'playerName': 'A', 'deckName': 'animals'})

    assert payloads(watcher, 'roomsList') == [['r1']]
    received = host.get_received()
    assert [pkt['args'][0] for pkt in received if pkt['name'] == 'roomsList'] == [['r1']]
    players = [pkt['args'][0] for pkt in received if pkt['name'] == 'updatePlayers']
    assert [p['name'] for p in players[0]] == ['A']
    assert registry.get('r1').deck_name == 'animals'


def test_create_room_twice_reports_error(make_client, registry):
    a, b = make_client(), make_client()
    a.emit('createRoom', {'roomId': 'r1', 'playerName': 'A', 'deckName': 'single'})
    b.get_received()
    b.emit('createRoom', {'roomId': 'r1', 'playerName': 'B', 'deckName': 'single'})
    assert payloads(b, 'error') == ['Room already exists']
    assert registry.room_ids() == ['r1']
    # Connection stays usable after the error
    assert b.is_connected()


def test_create_room_with_missing_deck(make_client, registry):
    a = make_client()
    a.emit('createRoom', {'roomId': 'r1', 'playerName': 'A', 'deckName': 'nope'})
    assert payloads(a, 'error') == ['Failed to load deck images']
    assert registry.room_ids() == []


def test_join_errors(make_client, registry):
    clients, ids = setup_room(make_client, names=('A', 'B'))
    late = make_client()
    late.emit('joinRoom', {'roomId': 'ghost', 'playerName': 'Z'})
    assert payloads(late, 'error') == ['Room does not exist']

    late.emit('joinRoom', {'roomId': 'r1', 'playerName': 'B'})
    assert payloads(late, 'error') == ['Name already taken in this room']
    assert len(registry.get('r1').players) == 2
    assert payloads(clients['A'], 'updatePlayers') == []


def test_positional_payloads_are_accepted(make_client, registry):
    clients, ids = setup_room(make_client)
    clients['B'].emit('startGame', 'r1')
    started = payloads(clients['C'], 'gameStarted')
    assert started == [{'id': ids['A'], 'name': 'A', 'points': 0}]
    assert registry.get('r1').phase.value == 'turn_start'


def test_full_round_ends_game_with_tied_winners(make_client, registry):
    clients, ids = setup_room(make_client)
    a, b, c = clients['A'], clients['B'], clients['C']

    a.emit('startGame', 'r1')
    received = b.get_received()
    assert [pkt['name'] for pkt in received] == ['updateRoomInfo', 'gameStarted']
    assert received[0]['args'][0] == {'deckName': 'single'}
    assert received[1]['args'][0]['name'] == 'A'

    a.emit('drawCard', 'r1')
    assert payloads(c, 'cardDrawn') == ['card1.png']
    a.get_received()
    b.get_received()

    b.emit('submitOnomatopoeia', 'r1', 'boing', 'B')
    assert payloads(a, 'onomatopoeiaList') == []
    c.emit('submitOnomatopoeia', 'r1', 'boing', 'C')
    assert payloads(a, 'onomatopoeiaList') == [[{'onomatopoeia': 'boing', 'playerIds': [ids['B'], ids['C']]}]]
    # Only the parent sees the list
    assert payloads(b, 'onomatopoeiaList') == []

    a.emit('chooseOnomatopoeia', 'r1', 'boing')
    received = c.get_received()
    names = [pkt['name'] for pkt in received]
    assert names == ['onomatopoeiaChosen', 'gameOver', 'roomsList']
    chosen = received[0]['args'][0]
    assert chosen['chosenPlayers'] == ['B', 'C']
    assert {p['name']: p['points'] for p in chosen['updatedPlayers']} == {'A': 0, 'B': 1, 'C': 1}
    over = received[1]['args'][0]
    assert sorted(w['name'] for w in over['winners']) == ['B', 'C']
    assert over['usageStats'][ids['B']] == {'topWord': 'boing', 'topCount': 1}
    assert received[2]['args'][0] == []
    assert 'r1' not in registry


def test_duplicate_submission_does_not_resend_list(make_client):
    clients, ids = setup_room(make_client, deck='animals')
    a, b, c = clients['A'], clients['B'], clients['C']
    a.emit('startGame', 'r1')
    a.emit('drawCard', 'r1')
    a.get_received()

    b.emit('submitOnomatopoeia', {'roomId': 'r1', 'text': 'boing', 'playerName': 'B'})
    b.emit('submitOnomatopoeia', {'roomId': 'r1', 'text': 'boing', 'playerName': 'B'})
    assert payloads(a, 'onomatopoeiaList') == []
    c.emit('submitOnomatopoeia', {'roomId': 'r1', 'text': 'pop', 'playerName': 'C'})
    b.emit('submitOnomatopoeia', {'roomId': 'r1', 'text': 'boing', 'playerName': 'B'})
    lists = payloads(a, 'onomatopoeiaList')
    assert len(lists) == 1
    assert [g['onomatopoeia'] for g in lists[0]] == ['boing', 'pop']


def test_choice_rotates_parent(make_client, registry):
    clients, ids = setup_room(make_client, deck='animals')
    a, b, c = clients['A'], clients['B'], clients['C']
    a.emit('startGame', 'r1')
    a.emit('drawCard', 'r1')
    b.emit('submitOnomatopoeia', 'r1', 'boing', 'B')
    c.emit('submitOnomatopoeia', 'r1', 'pop', 'C')
    for cl in (a, b, c):
        cl.get_received()

    a.emit('chooseOnomatopoeia', 'r1', 'pop')
    received = b.get_received()
    assert [pkt['name'] for pkt in received] == ['onomatopoeiaChosen', 'newTurn']
    assert received[0]['args'][0]['chosenPlayers'] == ['C']
    assert received[1]['args'][0]['name'] == 'B'

    room = registry.get('r1')
    assert room.current_turn_index == 1
    assert room.round_count == 2
    assert room.submission_groups == []

    # The old parent can no longer draw; the new one can
    a.emit('drawCard', 'r1')
    assert payloads(c, 'cardDrawn') == []
    b.emit('drawCard', 'r1')
    assert len(payloads(c, 'cardDrawn')) == 1


def test_draw_by_non_parent_is_ignored(make_client, registry):
    clients, ids = setup_room(make_client, deck='animals')
    clients['A'].emit('startGame', 'r1')
    for cl in clients.values():
        cl.get_received()

    clients['B'].emit('drawCard', 'r1')
    for cl in clients.values():
        assert cl.get_received() == []
    assert len(registry.get('r1').deck) == 3


def test_draw_from_empty_deck_ends_game(make_client, registry):
    clients, ids = setup_room(make_client, deck='empty', names=('A', 'B'))
    clients['A'].emit('startGame', 'r1')
    clients['B'].get_received()
    clients['A'].emit('drawCard', 'r1')
    over = payloads(clients['B'], 'gameOver')
    assert len(over) == 1
    assert len(over[0]['winners']) == 2
    assert 'r1' not in registry


def test_next_turn_forces_rotation(make_client, registry):
    clients, ids = setup_room(make_client, deck='animals')
    a, b = clients['A'], clients['B']
    a.emit('startGame', 'r1')
    b.emit('submitOnomatopoeia', 'r1', 'boing', 'B')
    b.get_received()

    b.emit('nextTurn', 'r1')
    assert payloads(b, 'newTurn') == [{'id': ids['B'], 'name': 'B', 'points': 0}]
    room = registry.get('r1')
    assert room.round_count == 2
    assert room.submission_groups == []


def test_events_for_missing_room_are_ignored(make_client):
    a = make_client()
    a.get_received()
    for event in ('startGame', 'drawCard', 'nextTurn'):
        a.emit(event, 'ghost')
    a.emit('submitOnomatopoeia', 'ghost', 'boing', 'A')
    a.emit('chooseOnomatopoeia', 'ghost', 'boing')
    assert a.get_received() == []


def test_disconnect_cleanup(make_client, registry):
    watcher = make_client()
    clients, ids = setup_room(make_client, names=('A', 'B'))
    watcher.get_received()

    clients['B'].disconnect()
    players = payloads(clients['A'], 'updatePlayers')
    assert [[p['name'] for p in ps] for ps in players] == [['A']]
    assert 'r1' in registry

    clients['A'].disconnect()
    assert 'r1' not in registry
    assert payloads(watcher, 'roomsList') == [[]]


def test_new_room_with_reused_id_is_isolated(make_client):
    clients, ids = setup_room(make_client, deck='empty', names=('A', 'B'))
    clients['A'].emit('startGame', 'r1')
    clients['A'].emit('drawCard', 'r1')
    clients['A'].get_received()

    # Old members are no longer subscribed once the game is over
    fresh = make_client()
    fresh.emit('createRoom', {'roomId': 'r1', 'playerName': 'Z', 'deckName': 'single'})
    assert payloads(clients['A'], 'updatePlayers') == []
    assert len(payloads(fresh, 'updatePlayers')) == 1
