from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from hcidissect import __version__
from hcidissect.core.artifacts import EventLogger
from hcidissect.core.config import DecoderConfig, load_decoder_config
from hcidissect.core.corpus import load_packets, parse_hex
from hcidissect.core.engine import DecodeStats, decode_hci, decode_stream
from hcidissect.core.parsers.hci_tables import parse_packet_type
from hcidissect.core.plugins import list_plugins, load_builtin_plugins
from hcidissect.core.render import to_json, to_record
from hcidissect.core.session import new_session


logger = logging.getLogger(__name__)


def _load_config(args: argparse.Namespace) -> DecoderConfig:
    config_dir = Path(args.config_dir).resolve() if args.config_dir else None
    try:
        cfg = load_decoder_config(config_dir)
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}") from e
    level = (args.log_level or cfg.log_level).upper()
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), format="%(levelname)s %(name)s: %(message)s")
    return cfg


def _cmd_decode(args: argparse.Namespace) -> int:
    cfg = _load_config(args)
    try:
        packet_type = parse_packet_type(args.type) if args.type else cfg.packet_type
        data = parse_hex(" ".join(args.hex))
    except ValueError as e:
        raise SystemExit(str(e)) from e

    node = decode_hci(packet_type, data, new_session())
    values, locations = to_json(node, indent=cfg.indent)
    print(values)
    if cfg.locations and not args.no_locations:
        print(locations)
    return 0 if node.ok else 1


def _cmd_file(args: argparse.Namespace) -> int:
    cfg = _load_config(args)
    path = Path(args.path) if args.path else cfg.input_path
    if path is None:
        raise SystemExit("No input file given (argument or input.path in config)")
    try:
        default_type = parse_packet_type(args.type) if args.type else cfg.packet_type
        packets = load_packets(path, default_type=default_type)
    except (OSError, ValueError) as e:
        raise SystemExit(f"Cannot load packets from {path}: {e}") from e

    session = new_session()
    stats = DecodeStats()
    with_locations = cfg.locations and not args.no_locations
    sink = EventLogger(Path(args.out)) if args.out else None
    try:
        nodes = decode_stream(((p.packet_type, p.data) for p in packets), session, stats)
        for packet, node in zip(packets, nodes):
            record = {"index": packet.index, **to_record(node, locations=with_locations)}
            if sink is not None:
                sink.log(record)
            else:
                print(json.dumps(record, ensure_ascii=False, indent=cfg.indent))
        if args.session:
            summary = {"session": session.to_dict(), "packets": stats.packets, "with_errors": stats.with_errors}
            if sink is not None:
                sink.log(summary)
            else:
                print(json.dumps(summary, ensure_ascii=False, indent=cfg.indent))
    finally:
        if sink is not None:
            sink.close()
    logger.info("decoded %d packet(s), %d with errors", stats.packets, stats.with_errors)
    if sink is not None:
        print(str(sink.path))
    return 0


def _cmd_plugins(_args: argparse.Namespace) -> int:
    load_builtin_plugins()
    print(json.dumps(list_plugins(), ensure_ascii=False, indent=2))
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config-dir",
        default=None,
        help="Directory containing *.yaml/*.yml/*.json configs",
    )
    p.add_argument("--log-level", default=None, help="Override logging.level (DEBUG, INFO, ...)")
    p.add_argument("--type", default=None, help="HCI packet type: cmd, acl, sco, evt, iso")
    p.add_argument("--no-locations", action="store_true", help="Do not print the location map")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hcidissect",
        description="hcidissect - Bluetooth HCI/L2CAP packet dissector",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    decode_p = subparsers.add_parser("decode", help="Decode one packet given as hex")
    _add_common(decode_p)
    decode_p.add_argument("hex", nargs="+", help='Packet bytes, e.g. "03 0c 00"')
    decode_p.set_defaults(func=_cmd_decode)

    file_p = subparsers.add_parser("file", help="Decode a hex-lines file with one shared session")
    _add_common(file_p)
    file_p.add_argument("path", nargs="?", default=None, help="Hex-lines file (default: input.path)")
    file_p.add_argument("--out", default=None, help="Write JSON lines to this file instead of stdout")
    file_p.add_argument("--session", action="store_true", help="Print the channel table after decoding")
    file_p.set_defaults(func=_cmd_file)

    plugins_p = subparsers.add_parser("plugins", help="List registered payload decoders")
    plugins_p.set_defaults(func=_cmd_plugins)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))
