"""JSON-over-MQTT client used by the simulation service and the `control` CLI.

paho-mqtt is callback based. `MqttClient` runs paho's network loop in the
background and adds:

- `publish()` / `subscribe()` speaking JSON objects
- message handlers called with `(topic, message)` on paho's network thread
- `request()`, a blocking command/reply exchange matched by `corr_id`
- resubscription of every topic after a reconnect

QoS is 0 throughout: notifications are a live feed, not a durable log.
"""

from __future__ import annotations

import json
import logging
import queue
import threading
import uuid
from typing import Any, Callable

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, dict[str, Any]], None]
Reply = "queue.Queue[dict[str, Any]]"


def decode_payload(payload: bytes | str) -> dict[str, Any] | None:
    """Parse a payload into a JSON object. Returns None for anything else."""
    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else str(payload)
        data = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None
    return data if isinstance(data, dict) else None


class MqttClient:
    def __init__(
        self,
        *,
        client_id: str,
        host: str,
        port: int,
        keepalive: int = 30,
    ) -> None:
        self.client_id = client_id
        self.host = host
        self.port = port
        self.keepalive = keepalive

        self._client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            clean_session=True,
        )
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message

        self._lock = threading.Lock()
        self._handlers: list[MessageHandler] = []
        self._topics: set[str] = set()
        # corr_id -> single-slot queue waited on by request()
        self._waiting: dict[str, Reply] = {}
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._client.connect(self.host, self.port, keepalive=self.keepalive)
        self._client.loop_start()
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._client.loop_stop()
        self._client.disconnect()
        self._started = False

    def add_handler(self, handler: MessageHandler) -> None:
        with self._lock:
            self._handlers.append(handler)

    def subscribe(self, topic: str) -> None:
        with self._lock:
            self._topics.add(topic)
        self._client.subscribe(topic, qos=0)

    def publish(self, topic: str, message: dict[str, Any]) -> None:
        payload = json.dumps(message, separators=(",", ":")).encode("utf-8")
        self._client.publish(topic, payload=payload, qos=0)

    def request(
        self,
        *,
        request_topic: str,
        response_topic: str,
        message: dict[str, Any],
        timeout: float = 5.0,
    ) -> dict[str, Any]:
        """Publish `message` and block until the reply with the same corr_id.

        Raises TimeoutError if no reply arrives within `timeout` seconds.
        """
        if response_topic not in self._topics:
            self.subscribe(response_topic)

        corr_id = uuid.uuid4().hex
        reply: Reply = queue.Queue(maxsize=1)
        with self._lock:
            self._waiting[corr_id] = reply

        self.publish(request_topic, {**message, "corr_id": corr_id, "reply_to": response_topic})
        try:
            return reply.get(timeout=timeout)
        except queue.Empty as e:
            raise TimeoutError(f"no reply to {message.get('type')!r} within {timeout}s") from e
        finally:
            with self._lock:
                self._waiting.pop(corr_id, None)

    # -------------------- paho callbacks (network thread) --------------------

    def _on_connect(self, client: mqtt.Client, userdata: Any, flags: Any, reason_code: Any, properties: Any) -> None:
        if reason_code.is_failure:
            logger.error("connection to %s:%d refused: %s", self.host, self.port, reason_code)
            return
        logger.info("connected to %s:%d as %s", self.host, self.port, self.client_id)
        with self._lock:
            topics = sorted(self._topics)
        for topic in topics:
            client.subscribe(topic, qos=0)

    def _on_disconnect(
        self, client: mqtt.Client, userdata: Any, flags: Any, reason_code: Any, properties: Any
    ) -> None:
        if self._started:
            logger.warning("disconnected from %s:%d (%s)", self.host, self.port, reason_code)

    def _on_message(self, client: mqtt.Client, userdata: Any, msg: mqtt.MQTTMessage) -> None:
        data = decode_payload(msg.payload)
        if data is None:
            logger.warning("ignoring non-JSON-object message on %s", msg.topic)
            return

        corr_id = data.get("corr_id")
        with self._lock:
            reply = self._waiting.get(corr_id) if isinstance(corr_id, str) else None
            handlers = list(self._handlers)
        if reply is not None:
            try:
                reply.put_nowait(data)
            except queue.Full:
                logger.debug("duplicate reply for corr_id=%s", corr_id)
            return

        for handler in handlers:
            try:
                handler(msg.topic, data)
            except Exception:
                # Keep paho's network thread alive.
                logger.exception("handler failed for message on %s", msg.topic)
