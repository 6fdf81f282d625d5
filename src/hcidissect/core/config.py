from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from hcidissect.core.parsers.hci_tables import HciPacketType, parse_packet_type


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class DecoderConfig:
    packet_type: HciPacketType = HciPacketType.CMD
    locations: bool = True
    indent: int | None = None
    log_level: str = "WARNING"
    input_path: Path | None = None


def collect_config_files(config_dir: Path) -> list[Path]:
    if not config_dir.exists():
        return []

    patterns = ("*.yaml", "*.yml", "*.json")
    files: set[Path] = set()
    for pattern in patterns:
        files.update(config_dir.glob(pattern))
    return sorted(files, key=lambda p: p.name.lower())


def load_config_file(path: Path) -> Any:
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    if suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    raise ValueError(f"Unsupported config file type: {path.name}")


def merge_root_dicts(config_items: list[dict[str, Any]]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for item in config_items:
        if item is None:
            continue
        if not isinstance(item, dict):
            raise ValueError("Invalid config: top level must be a mapping")
        for key, value in item.items():
            if key in merged:
                raise ValueError(f"Duplicate top-level config key: {key}")
            merged[key] = value
    return merged


def _section(merged: dict[str, Any], name: str) -> dict[str, Any]:
    section = merged.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Invalid config: {name} must be a mapping")
    return section


def parse_decoder_config(*, config_dir: Path, merged: dict[str, Any]) -> DecoderConfig:
    input_cfg = _section(merged, "input")
    output_cfg = _section(merged, "output")
    logging_cfg = _section(merged, "logging")

    packet_type = parse_packet_type(input_cfg.get("packet_type", "cmd"))

    indent = output_cfg.get("indent")
    if indent is not None and (not isinstance(indent, int) or isinstance(indent, bool) or indent < 0):
        raise ValueError("Invalid config: output.indent must be a non-negative integer")

    level = str(logging_cfg.get("level", "WARNING")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Invalid config: logging.level must be one of {', '.join(_LOG_LEVELS)}")

    return DecoderConfig(
        packet_type=packet_type,
        locations=bool(output_cfg.get("locations", True)),
        indent=indent,
        log_level=level,
        input_path=resolve_path(config_dir, input_cfg.get("path")),
    )


def load_decoder_config(config_dir: Path | None) -> DecoderConfig:
    if config_dir is None:
        return DecoderConfig()
    items = [load_config_file(path) for path in collect_config_files(config_dir)]
    return parse_decoder_config(config_dir=config_dir, merged=merge_root_dicts(items))


def resolve_path(config_dir: Path, maybe_path: str | None) -> Path | None:
    if maybe_path is None:
        return None
    path = Path(maybe_path)
    if path.is_absolute():
        return path
    return (config_dir / path).resolve()
