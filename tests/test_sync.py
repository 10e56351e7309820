"""
Tests for host/client play over a shared document store.
"""

import json
import random
from unittest.mock import MagicMock
import pytest
from twentyfive.config import GameConfig
from twentyfive.game import NO_ROB_OFFER, NOT_YOUR_TURN, GamePhase, TwentyFiveGame
from twentyfive.rules import MUST_FOLLOW_SUIT
from twentyfive.sync import (
    ACTION_DECLINE, ACTION_PLAY, ACTION_QUEUED, ACTION_ROB, DOCUMENT_CHANGED,
    HOST_ONLY, UNKNOWN_ACTION, ClientSession, GameAction, HostSession,
    InMemoryDocumentStore, public_document,
)
from twentyfive.redis_store import RedisDocumentStore
from tests.helpers import card, cards, make_deal

ROOM = "room-1"


@pytest.fixture
def table():
    """A two-seat room: the host plays seat 0, a client plays seat 1."""
    game = TwentyFiveGame(GameConfig(player_count=2, human_players=[0, 1]), random.Random(0))
    game.initialize()
    game.dealer = 1
    game.deal_new_hand(make_deal(["Kd 2d 7s 8s 9s", "Qd 3d 4s 5s 6s"], "3c"))

    store = InMemoryDocumentStore()
    host = HostSession(store, ROOM, game, seat=0)
    host.start()
    client = ClientSession(store, ROOM, seat=1)
    client.connect()
    yield store, host, client
    client.disconnect()
    host.stop()


class TestGameAction:

    def test_dict_form(self):
        action = GameAction(ACTION_PLAY, 1, card("Qd"))
        restored = GameAction.from_dict(json.loads(json.dumps(action.to_dict())))
        assert restored == action

    def test_ids_are_unique(self):
        assert GameAction(ACTION_DECLINE, 0).action_id != GameAction(ACTION_DECLINE, 0).action_id


class TestPublicDocument:

    def test_hides_private_cards(self, table):
        store, host, client = table
        document = public_document(host.game, 3, {})
        assert "pack" not in document
        assert "discard" not in document
        assert document["pack_size"] == 41
        assert all("hand" not in p for p in document["players"])
        assert [p["hand_count"] for p in document["players"]] == [5, 5]
        assert document["document_version"] == 3

    def test_each_seat_reads_its_own_hand(self, table):
        store, host, client = table
        assert store.read(ROOM, 0)["hand"] == [c.to_dict() for c in cards("Kd 2d 7s 8s 9s")]
        assert client.hand == cards("Qd 3d 4s 5s 6s")
        assert "hand" not in store.read(ROOM)


class TestClientMirror:

    def test_mirror_follows_host(self, table):
        store, host, client = table
        assert client.phase == GamePhase.PLAYING
        assert not client.is_my_turn
        assert client.valid_moves == []

        assert host.submit(GameAction(ACTION_PLAY, 0, card("Kd"))).ok
        assert client.is_my_turn
        assert client.trick_cards == cards("Kd")
        assert client.valid_moves == cards("Qd 3d")

    def test_illegal_play_refused_locally(self, table):
        store, host, client = table
        host.submit(GameAction(ACTION_PLAY, 0, card("Kd")))
        result = client.submit_play(card("4s"))
        assert result.reason == MUST_FOLLOW_SUIT
        assert client.pending is None
        assert store.pop_actions(ROOM) == []

    def test_out_of_turn_refused_locally(self, table):
        store, host, client = table
        assert client.submit_play(card("Qd")).reason == NOT_YOUR_TURN

    def test_play_confirmed_by_host(self, table):
        store, host, client = table
        host.submit(GameAction(ACTION_PLAY, 0, card("Kd")))
        assert client.submit_play(card("Qd")).ok

        assert client.pending is None
        assert client.last_result.ok
        assert client.phase == GamePhase.TRICK_COMPLETE
        assert card("Qd") not in client.hand
        assert host.game.trick_cards == cards("Kd Qd")

    def test_only_host_resolves(self, table):
        store, host, client = table
        host.submit(GameAction(ACTION_PLAY, 0, card("Kd")))
        client.submit_play(card("Qd"))

        assert client.commit_trick().reason == HOST_ONLY
        assert client.commit_hand().reason == HOST_ONLY
        assert host.game.phase == GamePhase.TRICK_COMPLETE

        assert host.commit_trick().ok
        assert client.document["score_board"]["scores"] == {"0": 5, "1": 0}
        assert client.phase == GamePhase.PLAYING
        assert host.commit_trick().reason is not None

    def test_rejected_guess_is_discarded(self, table):
        store, host, client = table
        # A move the host refuses: it is seat 0's turn
        action = GameAction(ACTION_PLAY, 1, card("Qd"))
        client.pending = action
        store.push_action(ROOM, action.to_dict())

        assert client.pending is None
        assert not client.last_result.ok
        assert client.last_result.reason == NOT_YOUR_TURN
        assert card("Qd") in client.hand
        assert host.game.trick == []

    def test_stale_document_ignored(self, table):
        store, host, client = table
        old = store.read(ROOM, 1)
        host.submit(GameAction(ACTION_PLAY, 0, card("Kd")))
        client.on_document(old)
        assert client.trick_cards == cards("Kd")

    def test_rob_actions_outside_robbing(self, table):
        store, host, client = table
        assert client.submit_decline().reason == NO_ROB_OFFER
        assert client.submit_rob(card("Qd")).reason == NO_ROB_OFFER
        assert host.apply(GameAction(ACTION_ROB, 1, card("Qd"))).reason == NO_ROB_OFFER


class TestHostQueue:

    def test_malformed_and_unknown_actions(self, table):
        store, host, client = table
        host.stop()
        store.push_action(ROOM, {"type": ACTION_PLAY})
        store.push_action(ROOM, GameAction("shuffle", 0).to_dict())
        results = host.process_pending_actions()
        assert [r.reason for r in results] == [UNKNOWN_ACTION, UNKNOWN_ACTION]
        assert host.game.trick == []

    def test_actions_applied_in_order(self, table):
        store, host, client = table
        host.stop()
        store.push_action(ROOM, GameAction(ACTION_PLAY, 0, card("Kd")).to_dict())
        store.push_action(ROOM, GameAction(ACTION_PLAY, 1, card("Qd")).to_dict())
        results = host.process_pending_actions()
        assert all(r.ok for r in results)
        assert host.game.phase == GamePhase.TRICK_COMPLETE

    def test_remote_rob(self):
        game = TwentyFiveGame(GameConfig(player_count=2, human_players=[0, 1]), random.Random(0))
        game.initialize()
        game.dealer = 0
        game.deal_new_hand(make_deal(["Kd 2d 7s 8s 9s", "Ac 3d 4s 5s 6s"], "3c"))
        store = InMemoryDocumentStore()
        host = HostSession(store, ROOM, game)
        host.start()
        client = ClientSession(store, ROOM, seat=1)
        client.connect()

        assert client.is_my_rob
        assert client.submit_rob(card("3d")).ok
        assert client.last_result.ok
        assert card("3c") in client.hand
        assert client.phase == GamePhase.PLAYING
        assert client.is_my_turn

    def test_listeners_can_unsubscribe(self):
        store = InMemoryDocumentStore()
        seen = []
        unsubscribe = store.subscribe(ROOM, lambda room, kind: seen.append(kind))
        store.push_action(ROOM, {})
        store.publish(ROOM, {"phase": "setup"}, {})
        unsubscribe()
        store.push_action(ROOM, {})
        assert seen == [ACTION_QUEUED, DOCUMENT_CHANGED]


class TestRedisDocumentStore:

    def make_store(self, results=None):
        client = MagicMock()
        pipe = MagicMock()
        client.pipeline.return_value = pipe
        if results is not None:
            pipe.execute.return_value = results
        return RedisDocumentStore(client), pipe

    def test_read_missing_room(self):
        store, _ = self.make_store([None, None])
        assert store.read(ROOM, 0) is None

    def test_read_seat_view(self):
        hand = [{"suit": "hearts", "rank": "5"}]
        store, pipe = self.make_store([json.dumps({"phase": "playing"}), json.dumps(hand)])
        view = store.read(ROOM, 2)
        assert view == {"phase": "playing", "hand": hand}
        pipe.hget.assert_any_call(f"room:{ROOM}:hands", "2")

    def test_publish(self):
        store, pipe = self.make_store()
        store.publish(ROOM, {"document_version": 4}, {0: [{"suit": "clubs", "rank": "2"}]})
        pipe.hset.assert_any_call(f"room:{ROOM}", mapping={
            "document_json": json.dumps({"document_version": 4}), "version": 4,
        })
        pipe.publish.assert_called_once_with(f"room:{ROOM}:events", DOCUMENT_CHANGED)
        pipe.execute.assert_called_once()

    def test_push_action(self):
        store, pipe = self.make_store()
        store.push_action(ROOM, {"type": ACTION_DECLINE})
        pipe.rpush.assert_called_once_with(f"room:{ROOM}:actions",
                                           json.dumps({"type": ACTION_DECLINE}))
        pipe.publish.assert_called_once_with(f"room:{ROOM}:events", ACTION_QUEUED)

    def test_pop_actions(self):
        store, pipe = self.make_store()
        pipe.lrange.return_value = [json.dumps({"type": ACTION_DECLINE}), "not json"]
        assert store.pop_actions(ROOM) == [{"type": ACTION_DECLINE}]
        pipe.delete.assert_called_once_with(f"room:{ROOM}:actions")

    def test_delete_room(self):
        store, _ = self.make_store()
        store.delete_room(ROOM)
        store.client.delete.assert_called_once_with(
            f"room:{ROOM}", f"room:{ROOM}:hands", f"room:{ROOM}:actions")
