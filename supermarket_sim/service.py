from __future__ import annotations

# MQTT front end for the simulator.
#
# This file contains three pieces:
# 1) `MqttNotifier`: publishes simulation notifications to `<ns>/notifications/<kind>`
# 2) `MqttSimulationService` + `main()`: accepts control commands from the broker,
#    drives a `SimulationController` and broadcasts status snapshots
# 3) `send_command()`: the client side used by `app control ...`

import argparse
import logging
import threading
import time
from typing import Any, TYPE_CHECKING

from .config import SimulationConfig, load_config
from .controller import SimulationController
from .customer import CustomerSnapshot
from .errors import ConfigError, ErrorResponse, SimulationStateError
from .events import ServicePointType
from .mqtt_topics import DEFAULT_NAMESPACE, control_requests, control_responses, notifications, status_updates
from .notifier import Notifier

if TYPE_CHECKING:
    from .mqtt_client import MqttClient

logger = logging.getLogger(__name__)

COMMANDS = ("configure", "start", "pause", "resume", "set_delay", "reset")


class MqttNotifier(Notifier):
    """Publish every notification as a JSON message. paho queues the send."""

    def __init__(self, mqtt: MqttClient, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.mqtt = mqtt
        self.namespace = namespace

    def _publish(self, kind: str, message: dict[str, Any]) -> None:
        self.mqtt.publish(notifications(kind, self.namespace), {"type": kind, **message})

    def on_customer_created(self, customer: CustomerSnapshot) -> None:
        self._publish("customer_created", customer.to_message())

    def on_customer_moved(self, customer_id: int, from_stage: ServicePointType, to_stage: ServicePointType) -> None:
        self._publish(
            "customer_moved",
            {"customer_id": customer_id, "from": from_stage.value, "to": to_stage.value},
        )

    def on_customer_completed(self, customer_id: int, final_stage: ServicePointType) -> None:
        self._publish("customer_completed", {"customer_id": customer_id, "stage": final_stage.value})

    def on_simulation_ended(self, final_time: float) -> None:
        self._publish("simulation_ended", {"time": final_time})

    def on_time_remaining_estimate(self, seconds_left: int | None) -> None:
        self._publish("time_remaining", {"seconds_left": seconds_left})


class MqttSimulationService:
    """MQTT adapter around the SimulationController."""

    def __init__(
        self,
        *,
        mqtt: MqttClient,
        namespace: str = DEFAULT_NAMESPACE,
        config: SimulationConfig | None = None,
        report_csv: str | None = None,
    ) -> None:
        self.mqtt = mqtt
        self.namespace = namespace
        self.controller = SimulationController(
            config=config,
            notifier=MqttNotifier(mqtt, namespace),
            report_csv=report_csv,
        )

        # Background publisher thread control.
        self._stop_event = threading.Event()
        self._status_thread: threading.Thread | None = None

    def start(self, *, publish_status_every: float = 1.0) -> None:
        self.mqtt.subscribe(control_requests(self.namespace))
        self.mqtt.add_handler(self._handle_message)

        self._status_thread = threading.Thread(
            target=self._status_publisher_loop,
            args=(publish_status_every,),
            daemon=True,
        )
        self._status_thread.start()

    def stop(self) -> None:
        """Stop the simulation and background threads. Call before disconnecting MQTT."""
        self._stop_event.set()
        self.controller.reset()
        t = self._status_thread
        if t and t.is_alive():
            t.join(timeout=1.0)

    def _status_publisher_loop(self, interval: float) -> None:
        while not self._stop_event.is_set():
            try:
                self.mqtt.publish(status_updates(self.namespace), self.controller.status())
            except Exception:
                # Status broadcasts are best effort; the next tick tries again.
                logger.debug("status publish failed", exc_info=True)
            self._stop_event.wait(interval)

    def _reply(self, reply_to: str, corr_id: str | None, message: dict[str, Any]) -> None:
        msg = dict(message)
        if corr_id is not None:
            msg["corr_id"] = corr_id
        self.mqtt.publish(reply_to, msg)

    def _handle_message(self, topic: str, msg: dict[str, Any]) -> None:
        if topic != control_requests(self.namespace):
            return

        mtype = msg.get("type")
        corr_id = msg.get("corr_id") if isinstance(msg.get("corr_id"), str) else None
        reply_to = msg.get("reply_to") if isinstance(msg.get("reply_to"), str) else None

        if mtype not in COMMANDS:
            response = ErrorResponse("unknown_command", f"unknown command {mtype!r}").to_message()
            if reply_to:
                self._reply(reply_to, corr_id, response)
            return

        try:
            self._dispatch(mtype, msg)
        except ConfigError as e:
            response = ErrorResponse("bad_config", str(e)).to_message()
        except SimulationStateError as e:
            response = ErrorResponse("bad_state", str(e)).to_message()
        except (KeyError, TypeError, ValueError) as e:
            response = ErrorResponse("bad_request", str(e)).to_message()
        else:
            response = {"type": "ack", "command": mtype, "state": self.controller.state.value}

        logger.info("command %s -> %s", mtype, response["type"])
        if reply_to:
            self._reply(reply_to, corr_id, response)

    def _dispatch(self, mtype: Any, msg: dict[str, Any]) -> None:
        if mtype == "configure":
            config = msg.get("config")
            if not isinstance(config, dict):
                raise ValueError("config object required")
            self.controller.configure(SimulationConfig.from_dict(config))
            return

        if mtype == "start":
            self.controller.start()
            return

        if mtype == "pause":
            self.controller.pause()
            return

        if mtype == "resume":
            self.controller.resume()
            return

        if mtype == "set_delay":
            self.controller.set_pacing_delay(int(msg["delay_ms"]))
            return

        if mtype == "reset":
            self.controller.reset()


def send_command(
    *,
    mqtt_host: str,
    mqtt_port: int,
    namespace: str,
    command: str,
    timeout: float = 5.0,
    **fields: Any,
) -> dict[str, Any]:
    """Send one control command to a running service and return its reply."""
    from .mqtt_client import MqttClient

    client_id = f"control-{int(time.time() * 1000)}"
    mqtt = MqttClient(client_id=client_id, host=mqtt_host, port=mqtt_port)
    mqtt.start()

    try:
        return mqtt.request(
            request_topic=control_requests(namespace),
            response_topic=control_responses(client_id, namespace),
            message={"type": command, **fields},
            timeout=timeout,
        )
    finally:
        mqtt.stop()


def main() -> None:
    # Import MQTT dependencies only when running the real service.
    from .mqtt_client import MqttClient

    parser = argparse.ArgumentParser(description="Simulation service (MQTT)")
    parser.add_argument("--mqtt-host", default="127.0.0.1")
    parser.add_argument("--mqtt-port", type=int, default=1883)
    parser.add_argument("--namespace", default=DEFAULT_NAMESPACE)
    parser.add_argument("--config", default=None, help="JSON configuration file")
    parser.add_argument("--report-csv", default=None, help="append completed customers to this CSV file")
    parser.add_argument(
        "--publish-status-every",
        type=float,
        default=1.0,
        help="seconds between broadcast status updates",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")

    config = load_config(args.config) if args.config else SimulationConfig()

    mqtt_client = MqttClient(client_id="simulator", host=args.mqtt_host, port=args.mqtt_port)
    mqtt_client.start()

    service = MqttSimulationService(
        mqtt=mqtt_client,
        namespace=args.namespace,
        config=config,
        report_csv=args.report_csv,
    )
    service.start(publish_status_every=args.publish_status_every)

    print(f"[sim] connected to MQTT {args.mqtt_host}:{args.mqtt_port}, namespace={args.namespace}")

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        service.stop()
        mqtt_client.stop()


if __name__ == "__main__":
    main()
