from __future__ import annotations

# Single-entrypoint runner.
#
# Main ways to use the simulator:
#     python -m supermarket_sim.app run --simulation-time 480 --seed 1 [--gui]
#     python -m supermarket_sim.app serve            (MQTT control service)
#     python -m supermarket_sim.app control pause    (talk to a running service)
#     python -m supermarket_sim.app config init my.json
#     python -m supermarket_sim.app config save peak --from my.json   (then: config list)

import argparse
import json
import logging
import sys

from .config import (
    DEFAULT_CONFIG_DIR,
    SimulationConfig,
    config_path,
    delete_config,
    list_configs,
    load_config,
    save_config,
)
from .errors import ConfigError
from .mqtt_topics import DEFAULT_NAMESPACE

# Flags of `run` that map 1:1 onto SimulationConfig fields.
CONFIG_FLAGS: tuple[tuple[str, type], ...] = (
    ("arrival_distribution", str),
    ("arrival_param", float),
    ("entrance_distribution", str),
    ("entrance_param", float),
    ("service_distribution", str),
    ("service_param", float),
    ("express_customer_percentage", float),
    ("simulation_time", float),
    ("delay_ms", int),
    ("seed", int),
)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Supermarket discrete-event simulator - main entrypoint")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def add_mqtt_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--mqtt-host", default="127.0.0.1")
        p.add_argument("--mqtt-port", type=int, default=1883)
        p.add_argument("--namespace", default=DEFAULT_NAMESPACE)

    # ---- Normal operation: run a simulation in this process ----
    p_run = sub.add_parser("run", help="Run one simulation (headless, or with --gui)")
    p_run.add_argument("--config", default=None, help="JSON configuration file")
    for name, kind in CONFIG_FLAGS:
        p_run.add_argument("--" + name.replace("_", "-"), type=kind, default=None)
    p_run.add_argument("--report-csv", default=None, help="write completed customers to this CSV file")
    p_run.add_argument("--verbose", action="store_true", help="print every customer movement")
    p_run.add_argument("--gui", action="store_true", help="open the Tkinter control panel")
    p_run.add_argument("--log-level", default="WARNING")

    # ---- MQTT service and its remote control ----
    p_serve = sub.add_parser("serve", help="Start the MQTT simulation service")
    add_mqtt_args(p_serve)
    p_serve.add_argument("--config", default=None)
    p_serve.add_argument("--report-csv", default=None)

    p_ctl = sub.add_parser("control", help="Send one control command to a running service")
    add_mqtt_args(p_ctl)
    p_ctl.add_argument("command", choices=["start", "pause", "resume", "reset", "set_delay", "configure"])
    p_ctl.add_argument("--delay-ms", type=int, default=None, help="for set_delay")
    p_ctl.add_argument("--config", default=None, help="JSON configuration file, for configure")

    # ---- Configuration files ----
    p_cfg = sub.add_parser("config", help="Configuration file helpers")
    cfg_sub = p_cfg.add_subparsers(dest="cfg_cmd", required=True)
    p_init = cfg_sub.add_parser("init", help="Write the default configuration as JSON")
    p_init.add_argument("path")
    p_show = cfg_sub.add_parser("show", help="Validate a configuration file and print it")
    p_show.add_argument("path")
    p_save = cfg_sub.add_parser("save", help="Store a configuration under a name")
    p_save.add_argument("name")
    p_save.add_argument("--from", dest="source", default=None, help="JSON file to copy (default: built-in defaults)")
    p_list = cfg_sub.add_parser("list", help="List saved configuration names")
    p_delete = cfg_sub.add_parser("delete", help="Delete a saved configuration")
    p_delete.add_argument("name")
    for p in (p_save, p_list, p_delete):
        p.add_argument("--dir", default=str(DEFAULT_CONFIG_DIR), help="directory of saved configurations")

    args = parser.parse_args(argv)

    try:
        if args.cmd == "run":
            _run(args)
            return

        if args.cmd == "serve":
            from .service import main as serve

            serve_args = [
                "--mqtt-host",
                args.mqtt_host,
                "--mqtt-port",
                str(args.mqtt_port),
                "--namespace",
                args.namespace,
            ]
            if args.config:
                serve_args += ["--config", args.config]
            if args.report_csv:
                serve_args += ["--report-csv", args.report_csv]
            _dispatch_to_module_main(serve, serve_args)
            return

        if args.cmd == "control":
            _control(args)
            return

        if args.cmd == "config":
            if args.cfg_cmd == "init":
                path = save_config(SimulationConfig(), args.path)
                print(f"[config] wrote defaults to {path}")
            elif args.cfg_cmd == "show":
                print(json.dumps(load_config(args.path).to_dict(), indent=2, sort_keys=True))
            elif args.cfg_cmd == "save":
                config = load_config(args.source) if args.source else SimulationConfig()
                path = save_config(config, config_path(args.name, args.dir))
                print(f"[config] saved {args.name} to {path}")
            elif args.cfg_cmd == "list":
                for name in list_configs(args.dir):
                    print(name)
            elif delete_config(args.name, args.dir):
                print(f"[config] deleted {args.name}")
            else:
                raise ConfigError(f"no saved configuration named {args.name!r}")
            return
    except ConfigError as e:
        parser.exit(2, f"error: {e}\n")


def build_config(args: argparse.Namespace) -> SimulationConfig:
    """File values first, then any explicit command-line flags."""
    config = load_config(args.config) if args.config else SimulationConfig()
    overrides = {name: getattr(args, name) for name, _kind in CONFIG_FLAGS}
    return config.with_overrides(**overrides).validate()


def _run(args: argparse.Namespace) -> None:
    from .controller import SimulationController
    from .notifier import ConsoleNotifier, FanoutNotifier, QueueNotifier

    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(name)s %(levelname)s %(message)s")
    config = build_config(args)

    if args.gui:
        from .gui import run_dashboard

        inbox = QueueNotifier()
        controller = SimulationController(
            config=config,
            notifier=FanoutNotifier(inbox, ConsoleNotifier(verbose=args.verbose)),
            report_csv=args.report_csv,
        )
        run_dashboard(controller, inbox)
        return

    controller = SimulationController(
        config=config,
        notifier=ConsoleNotifier(verbose=args.verbose),
        report_csv=args.report_csv,
    )
    print(f"[sim] running until t={config.simulation_time} (seed={config.seed})")
    model = controller.start()
    try:
        while not controller.join(timeout=0.5):
            pass
    except KeyboardInterrupt:
        controller.reset()
        print("[sim] interrupted")
        return

    if model.error is not None:
        raise SystemExit(f"[sim] simulation failed: {model.error}")

    status = controller.status()
    report = status["report"]
    print(f"[sim] completed customers: {report['completed']}")
    print(f"[sim] mean time in store: {report['mean_time_in_store']:0.2f}")
    for lane, count in sorted(report["by_lane"].items()):
        print(f"[sim]   via {lane}: {count}")
    for name, info in status["service_points"].items():
        print(
            f"[sim] {name}: served={info['served']} mean_service={info['mean_service_time']:0.2f} "
            f"utilization={info['utilization'] * 100:0.0f}% max_queue={info['max_queue_len']}"
        )
    if args.report_csv:
        print(f"[sim] report written to {args.report_csv}")


def _control(args: argparse.Namespace) -> None:
    from .service import send_command

    fields: dict = {}
    if args.command == "set_delay":
        if args.delay_ms is None:
            raise ConfigError("set_delay requires --delay-ms")
        fields["delay_ms"] = args.delay_ms
    if args.command == "configure":
        if args.config is None:
            raise ConfigError("configure requires --config")
        fields["config"] = load_config(args.config).to_dict()

    resp = send_command(
        mqtt_host=args.mqtt_host,
        mqtt_port=args.mqtt_port,
        namespace=args.namespace,
        command=args.command,
        **fields,
    )
    if resp.get("type") == "ack":
        print(f"[control] {args.command}: ok (state={resp.get('state')})")
    else:
        print(f"[control] {args.command}: error {resp.get('code')}: {resp.get('message')}")


def _dispatch_to_module_main(module_main, argv: list[str]) -> None:
    old_argv = sys.argv[:]
    try:
        sys.argv = [old_argv[0], *argv]
        module_main()
    finally:
        sys.argv = old_argv


if __name__ == "__main__":
    main()
