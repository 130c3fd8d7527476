"""Runtime configuration for the sampling/display pipeline."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, TypeVar

import yaml

SOURCES = ("shtc3", "synthetic")
RENDERERS = ("chart", "console")

T = TypeVar("T")


def _parse_address(value: Any) -> int:
    # YAML and the CLI may hand over "0x70"
    if isinstance(value, str):
        return int(value, 0)
    return int(value)


def _coerce(name: str, value: Any, convert: Callable[[Any], T]) -> T:
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {name}: {value!r}") from exc


@dataclass(slots=True)
class MonitorConfig:
    """
    Tuning knobs for sampling and rendering.

    The defaults sample every 50 ms, redraw every 25 ms and keep the last
    100 pairs on screen. Values are fixed once the pipeline is built.
    """

    source: str = "shtc3"
    i2c_device: str = "/dev/i2c-1"
    i2c_address: int = 0x70

    sample_period_s: float = 0.05
    render_period_s: float = 0.025
    capacity: int = 100
    channel_size: int = 1000

    renderer: str = "chart"
    temperature_max: float = 50.0
    humidity_max: float = 100.0

    log_level: str = "INFO"

    def sanitized(self) -> MonitorConfig:
        """Return a copy with derived limits applied; bad values raise ``ValueError``."""
        source = str(self.source).strip().lower()
        if source not in SOURCES:
            raise ValueError(f"Unknown source {self.source!r} (expected one of {SOURCES})")
        renderer = str(self.renderer).strip().lower()
        if renderer not in RENDERERS:
            raise ValueError(f"Unknown renderer {self.renderer!r} (expected one of {RENDERERS})")
        return MonitorConfig(
            source=source,
            i2c_device=str(self.i2c_device),
            i2c_address=_coerce("i2c_address", self.i2c_address, _parse_address),
            sample_period_s=max(0.001, _coerce("sample_period_s", self.sample_period_s, float)),
            render_period_s=max(0.001, _coerce("render_period_s", self.render_period_s, float)),
            capacity=max(1, _coerce("capacity", self.capacity, int)),
            channel_size=max(0, _coerce("channel_size", self.channel_size, int)),
            renderer=renderer,
            temperature_max=max(1.0, _coerce("temperature_max", self.temperature_max, float)),
            humidity_max=max(1.0, _coerce("humidity_max", self.humidity_max, float)),
            log_level=str(self.log_level).strip().upper() or "INFO",
        )

    def with_overrides(self, **overrides: Any) -> MonitorConfig:
        """Apply non-``None`` overrides (e.g. from the CLI) and sanitize."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes).sanitized()


def _read_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Pick :class:`MonitorConfig` fields out of a YAML document.

    Keys under a ``monitor:`` block take precedence over top-level keys.
    Unknown keys and keys written without a value (``capacity:``) are
    dropped so the dataclass default applies.
    """
    merged = {key: value for key, value in data.items() if key != "monitor"}
    section = data.get("monitor")
    if isinstance(section, Mapping):
        merged.update(section)
    names = {f.name for f in fields(MonitorConfig)}
    return {key: value for key, value in merged.items() if key in names and value is not None}


def config_from_mapping(data: Mapping[str, Any] | None) -> MonitorConfig:
    """Build a sanitized :class:`MonitorConfig` from parsed YAML."""
    return MonitorConfig(**_read_fields(data or {})).sanitized()


def load_config(path: str | Path | None) -> MonitorConfig:
    """
    Load configuration from the YAML file at ``path``.

    ``None`` means no file was given and yields the defaults. A path that
    does not exist, a document that is not a mapping and values of the
    wrong type all raise ``ValueError``.
    """
    if path is None:
        return MonitorConfig()
    cfg_path = Path(path)
    try:
        text = cfg_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {cfg_path}") from exc
    raw = yaml.safe_load(text)
    if raw is None:
        return MonitorConfig()
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["MonitorConfig", "RENDERERS", "SOURCES", "config_from_mapping", "load_config"]
