"""Command-line host for the backend link.

Stands in for a GUI shell: it loads persisted settings, builds a
``LinkController`` and runs one operation per invocation.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Optional

from ..adapters.storage_local import StorageLocal
from ..domain.link import AUTODISCOVER_FAILED, NO_SCRIPT, Payload, Script
from ..utils import logging as logging_utils
from ..viewmodels.settings_vm import SettingsVM
from ..viewmodels.status_format import snapshot_lines
from .controller import LinkController

_log = logging.getLogger(__name__)


def build_settings(storage: StorageLocal) -> SettingsVM:
    """Load persisted settings; unreadable files fall back to defaults."""
    settings_vm = SettingsVM(on_save=storage.save_user_settings)
    payload = None
    try:
        payload = storage.load_user_settings()
    except (OSError, ValueError) as exc:
        _log.warning("Could not load settings: %s", exc)
    if payload is not None:
        try:
            settings_vm.apply_dict(payload)
        except ValueError as exc:
            _log.warning("Ignoring stored settings: %s", exc)
    return settings_vm


def _read_payload(args: argparse.Namespace) -> Payload:
    if args.code is not None:
        return Script.from_text(args.code) if args.code else NO_SCRIPT
    if args.file is None:
        return NO_SCRIPT
    if args.file == "-":
        data = sys.stdin.buffer.read()
    else:
        with open(args.file, "rb") as f:
            data = f.read()
    return Script(data) if data else NO_SCRIPT


async def cmd_send(controller: LinkController, args: argparse.Namespace) -> int:
    payload = _read_payload(args)
    port = args.port or controller.settings_vm.last_port
    if not port:
        port = await controller.autodiscover()
        if port == AUTODISCOVER_FAILED:
            print(AUTODISCOVER_FAILED)
            return 1
    report = await controller.send_report(payload, port)
    if args.json:
        print(json.dumps({"port": report.port, "ok": report.ok, "bytes_sent": report.bytes_sent, "message": report.message}))
    else:
        print(report.message)
    return 0 if report.ok else 1


async def cmd_check(controller: LinkController, args: argparse.Namespace) -> int:
    live = await controller.check_port_live(args.port)
    print(json.dumps({"port": args.port, "live": live}) if args.json else ("live" if live else "closed"))
    return 0 if live else 1


async def cmd_attach(controller: LinkController, args: argparse.Namespace) -> int:
    result = await controller.autodiscover()
    print(json.dumps({"port": result}) if args.json else result)
    return 1 if result == AUTODISCOVER_FAILED else 0


async def cmd_ports(controller: LinkController, args: argparse.Namespace) -> int:
    snapshot = await controller.port_status()
    if args.json:
        print(json.dumps(snapshot.as_dict(), indent=2))
    else:
        print("\n".join(snapshot_lines(snapshot)))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="execlink", description="Deliver scripts to a local execution backend.")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(x: argparse.ArgumentParser) -> None:
        x.add_argument("--settings-dir", default=os.environ.get("EXECLINK_STORAGE_ROOT") or ".")
        x.add_argument("--send-timeout-ms", type=int, default=None)
        x.add_argument("--probe-timeout-ms", type=int, default=None)
        x.add_argument("--debug", action="store_true")
        x.add_argument("--json", action="store_true")

    send = sub.add_parser("send", help="send a script (connect only when none is given)")
    add_common(send)
    send.add_argument("--port", default=None)
    source = send.add_mutually_exclusive_group()
    source.add_argument("--file", default=None, help="script file, '-' for stdin")
    source.add_argument("--code", default=None, help="script text")
    send.set_defaults(func=cmd_send)

    check = sub.add_parser("check", help="check whether a port accepts connections")
    add_common(check)
    check.add_argument("port")
    check.set_defaults(func=cmd_check)

    attach = sub.add_parser("attach", help="find the backend on the candidate ports")
    add_common(attach)
    attach.set_defaults(func=cmd_attach)

    ports = sub.add_parser("ports", help="show liveness of every candidate port")
    add_common(ports)
    ports.set_defaults(func=cmd_ports)
    return p


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logging_utils.configure_root()

    storage = StorageLocal(root_dir=args.settings_dir)
    settings_vm = build_settings(storage)
    level = logging_utils.apply_preferences(settings_vm.debug_logging or args.debug)
    _log.debug("Effective log level: %s", logging.getLevelName(level))

    try:
        controller = LinkController(
            settings_vm,
            send_timeout_ms=args.send_timeout_ms,
            probe_timeout_ms=args.probe_timeout_ms,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    try:
        return int(asyncio.run(args.func(controller, args)))
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
