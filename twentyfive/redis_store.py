"""
Redis-backed DocumentStore for networked "25" rooms.

Layout per room:
    room:{id}            hash: document_json, version
    room:{id}:hands      hash: seat -> hand json
    room:{id}:actions    list: queued action json, oldest first
    room:{id}:events     pub/sub channel announcing changes
"""

import json
import logging
from typing import Any, Callable, Dict, List
import redis
from twentyfive.sync import ACTION_QUEUED, DOCUMENT_CHANGED, DocumentStore, StoreListener

logger = logging.getLogger(__name__)


class RedisDocumentStore(DocumentStore):
    """
    Shares rooms between processes through a Redis server.

    The client must be created with ``decode_responses=True``, for example
    ``redis.StrictRedis(host="localhost", port=6379, decode_responses=True)``.
    """

    def __init__(self, client: redis.StrictRedis):
        self.client = client
        self._threads = []

    @staticmethod
    def _room_key(room_id: str) -> str:
        return f"room:{room_id}"

    def _channel(self, room_id: str) -> str:
        return f"{self._room_key(room_id)}:events"

    def publish(self, room_id, document, hands):
        key = self._room_key(room_id)
        pipe = self.client.pipeline()
        pipe.hset(key, mapping={
            "document_json": json.dumps(document),
            "version": document.get("document_version", 0),
        })
        pipe.delete(f"{key}:hands")
        if hands:
            pipe.hset(f"{key}:hands", mapping={
                str(seat): json.dumps(cards) for seat, cards in hands.items()
            })
        pipe.publish(self._channel(room_id), DOCUMENT_CHANGED)
        pipe.execute()

    def read(self, room_id, seat=None):
        key = self._room_key(room_id)
        pipe = self.client.pipeline()
        pipe.hget(key, "document_json")
        pipe.hget(f"{key}:hands", str(seat) if seat is not None else "")
        document_json, hand_json = pipe.execute()
        if not document_json:
            return None
        try:
            view = json.loads(document_json)
            if seat is not None:
                view["hand"] = json.loads(hand_json) if hand_json else []
        except json.JSONDecodeError as e:
            logger.warning(f"Room {room_id} holds an unreadable document: {e}")
            return None
        return view

    def push_action(self, room_id, action):
        pipe = self.client.pipeline()
        pipe.rpush(f"{self._room_key(room_id)}:actions", json.dumps(action))
        pipe.publish(self._channel(room_id), ACTION_QUEUED)
        pipe.execute()

    def pop_actions(self, room_id) -> List[Dict[str, Any]]:
        key = f"{self._room_key(room_id)}:actions"
        while True:
            pipe = self.client.pipeline()
            try:
                pipe.watch(key)
                raw_actions = pipe.lrange(key, 0, -1)
                pipe.multi()
                pipe.delete(key)
                pipe.execute()
                break
            except redis.exceptions.WatchError:
                # A client pushed meanwhile; read the list again
                continue
            finally:
                pipe.reset()

        actions = []
        for raw in raw_actions:
            try:
                actions.append(json.loads(raw))
            except json.JSONDecodeError:
                logger.warning(f"Dropping unreadable action in room {room_id}")
        return actions

    def subscribe(self, room_id, listener: StoreListener) -> Callable[[], None]:
        pubsub = self.client.pubsub(ignore_subscribe_messages=True)

        def handler(message):
            listener(room_id, message["data"])

        pubsub.subscribe(**{self._channel(room_id): handler})
        thread = pubsub.run_in_thread(sleep_time=0.05, daemon=True)
        self._threads.append(thread)

        def unsubscribe():
            thread.stop()
            pubsub.close()
            if thread in self._threads:
                self._threads.remove(thread)
        return unsubscribe

    def delete_room(self, room_id: str):
        key = self._room_key(room_id)
        self.client.delete(key, f"{key}:hands", f"{key}:actions")

    def close(self):
        for thread in list(self._threads):
            thread.stop()
        self._threads = []
