import threading

import pytest

from numbergame.errors import AlreadySeated, PlayerNotFound
from numbergame.models import PLAYING
from numbergame.services.games import PLAYER_LEFT, ROOM_DELETED
from numbergame.services.games.scheduler import DisconnectScheduler


def playing_room(engine):
    room, _ = engine.create_room('A', 'sid-A')
    engine.join_room('1234', 'B', 'sid-B')
    engine.join_room('1234', 'C', 'sid-C')
    for sid, secret in (('sid-A', 5), ('sid-B', 9), ('sid-C', 12)):
        engine.set_ready('1234', sid, secret)
    engine.start_game('1234')
    return room


def test_removal_fires_after_grace_period(engine, tasks):
    room, _ = engine.create_room('Ann', 'sid-a')
    engine.join_room('1234', 'Bob', 'sid-b')
    seen = []
    engine.subscribe(seen.append)

    engine.schedule_removal('sid-b')
    assert engine.is_removal_pending('sid-b')
    assert [p.name for p in room.players] == ['Ann', 'Bob']

    tasks.run()
    assert not engine.is_removal_pending('sid-b')
    assert [p.name for p in room.players] == ['Ann']
    assert len(seen) == 1
    assert seen[0].action == PLAYER_LEFT
    assert seen[0].player.name == 'Bob'


def test_rejoin_within_grace_cancels_removal(engine, tasks):
    room = playing_room(engine)
    ann = room.players[0]
    seen = []
    engine.subscribe(seen.append)

    engine.schedule_removal('sid-A')
    _, player = engine.rejoin_room('1234', 'A', 'sid-A2')
    tasks.run()

    assert player is ann
    assert seen == []
    assert room.players[0] is ann
    assert ann.id == 'sid-A2'
    assert ann.secret_number == 5 and ann.is_ready and not ann.is_eliminated
    assert room.game_state == PLAYING
    # It was A's turn before the drop and it still is
    assert room.current_player is ann
    outcome = engine.eliminate_called_value('1234', 9, 'sid-A2')
    assert [p.name for p in outcome.eliminated] == ['B']


def test_rejoin_after_expiry_finds_nobody(engine, tasks):
    engine.create_room('Ann', 'sid-a')
    engine.join_room('1234', 'Bob', 'sid-b')
    engine.schedule_removal('sid-b')
    tasks.run()
    with pytest.raises(PlayerNotFound):
        engine.rejoin_room('1234', 'Bob', 'sid-b2')


def test_last_player_expiring_deletes_room(engine, tasks):
    engine.create_room('Ann', 'sid-a')
    seen = []
    engine.subscribe(seen.append)
    engine.schedule_removal('sid-a')
    tasks.run()
    assert seen[0].action == ROOM_DELETED
    assert seen[0].room_code == '1234'
    assert len(engine.registry) == 0


def test_expiry_leaves_no_room_behind_for_one_connection(engine, tasks):
    engine.create_room('Ann', 'sid-x')
    with pytest.raises(AlreadySeated):
        engine.create_room('Ann2', 'sid-x')
    engine.schedule_removal('sid-x')
    tasks.run()
    assert len(engine.registry) == 0
    assert engine.find_room_by_connection('sid-x') is None


def test_rescheduling_replaces_previous_timer(engine, tasks):
    engine.create_room('Ann', 'sid-a')
    engine.join_room('1234', 'Bob', 'sid-b')
    seen = []
    engine.subscribe(seen.append)

    engine.schedule_removal('sid-b')
    engine.schedule_removal('sid-b')
    assert len(tasks.tasks) == 2
    tasks.run()
    # Only the newest timer fires
    assert len(seen) == 1


def test_expiry_for_unseated_connection_is_quiet(engine, tasks):
    seen = []
    engine.subscribe(seen.append)
    engine.schedule_removal('ghost')
    tasks.run()
    assert seen == []


def test_expiry_mid_game_can_end_it(engine, tasks):
    room, _ = engine.create_room('A', 'sid-A')
    engine.join_room('1234', 'B', 'sid-B')
    engine.set_ready('1234', 'sid-A', 5)
    engine.set_ready('1234', 'sid-B', 9)
    engine.start_game('1234')
    seen = []
    engine.subscribe(seen.append)

    engine.schedule_removal('sid-B')
    tasks.run()
    assert seen[0].game_over
    assert seen[0].winner.name == 'A'


def test_failing_listener_does_not_block_others(engine, tasks):
    engine.create_room('Ann', 'sid-a')
    engine.join_room('1234', 'Bob', 'sid-b')
    seen = []

    def broken(outcome):
        raise RuntimeError('socket gone')

    engine.subscribe(broken)
    engine.subscribe(seen.append)
    engine.schedule_removal('sid-b')
    tasks.run()
    assert len(seen) == 1


def test_cancel_reports_whether_timer_existed(tasks):
    fired = []
    scheduler = DisconnectScheduler(fired.append, grace_period=5,
                                    start_background_task=tasks.start, sleep=tasks.sleep)
    assert scheduler.cancel('sid-x') is False
    scheduler.schedule('sid-x')
    assert scheduler.pending_count() == 1
    assert scheduler.cancel('sid-x') is True
    tasks.run()
    assert fired == []


def test_cancel_all_drops_every_timer(tasks):
    fired = []
    scheduler = DisconnectScheduler(fired.append, start_background_task=tasks.start, sleep=tasks.sleep)
    scheduler.schedule('sid-x')
    scheduler.schedule('sid-y')
    assert scheduler.cancel_all() == 2
    tasks.run()
    assert fired == []


def test_scheduler_sleeps_until_deadline(tasks):
    slept = []
    scheduler = DisconnectScheduler(lambda sid: None, grace_period=10,
                                    start_background_task=tasks.start, sleep=slept.append)
    scheduler.schedule('sid-x')
    scheduler.schedule('sid-y', grace_period=3)
    tasks.run()
    assert 9 < slept[0] <= 10
    assert 2 < slept[1] <= 3


def test_default_scheduler_uses_real_threads():
    fired = threading.Event()
    scheduler = DisconnectScheduler(lambda sid: fired.set(), grace_period=0.05)
    scheduler.schedule('sid-x')
    assert fired.wait(2.0)
    assert not scheduler.is_pending('sid-x')
