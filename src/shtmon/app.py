"""Command-line entry point for the live SHTC3 monitor.

``python -m shtmon``, the ``shtmon`` console script and ``main.py`` all flow
through :func:`main`, which returns the process exit status: 0 after a
user-requested stop, 1 after a sensor/render failure and 2 for usage errors.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import MonitorConfig, load_config
from .config.runtime import RENDERERS, SOURCES
from .core.errors import MonitorError
from .core.wiring import build_pipeline, run_pipeline
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Live SHTC3 temperature/humidity monitor")
    parser.add_argument(
        "--config",
        type=Path,
        help="Optional YAML file describing MonitorConfig overrides",
    )
    parser.add_argument("--source", choices=SOURCES, help="Sample source (default: shtc3)")
    parser.add_argument("--device", help="I2C bus device, e.g. /dev/i2c-1 or 1")
    parser.add_argument(
        "--address",
        type=lambda text: int(text, 0),
        help="SHTC3 I2C address (default: 0x70)",
    )
    parser.add_argument("--sample-ms", type=float, help="Sampling period in milliseconds")
    parser.add_argument("--render-ms", type=float, help="Render period in milliseconds")
    parser.add_argument("--capacity", type=int, help="Number of sample pairs kept on screen")
    parser.add_argument(
        "--channel-size",
        type=int,
        help="Maximum pairs waiting between sampling and rendering (0 = unbounded)",
    )
    parser.add_argument("--renderer", choices=RENDERERS, help="Display backend (default: chart)")
    parser.add_argument("--log-level", help="Logging level name (DEBUG, INFO, ...)")
    parser.add_argument(
        "--duration",
        type=float,
        help="Stop automatically after this many seconds",
    )
    return parser


def _resolve_config(args: argparse.Namespace) -> MonitorConfig:
    cfg = load_config(args.config) if args.config else MonitorConfig()
    return cfg.with_overrides(
        source=args.source,
        i2c_device=args.device,
        i2c_address=args.address,
        sample_period_s=None if args.sample_ms is None else args.sample_ms / 1000.0,
        render_period_s=None if args.render_ms is None else args.render_ms / 1000.0,
        capacity=args.capacity,
        channel_size=args.channel_size,
        renderer=args.renderer,
        log_level=args.log_level,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_arg_parser()
    args = parser.parse_args(None if argv is None else list(argv))
    try:
        cfg = _resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    setup_logging(cfg.log_level)
    logger.info(
        "Starting monitor: source=%s renderer=%s sample=%.0f ms render=%.0f ms capacity=%d",
        cfg.source,
        cfg.renderer,
        cfg.sample_period_s * 1000.0,
        cfg.render_period_s * 1000.0,
        cfg.capacity,
    )

    try:
        handles = build_pipeline(cfg)
    except MonitorError as exc:
        logger.error("Could not start monitor: %s", exc)
        return 1

    outcome = asyncio.run(run_pipeline(handles, duration_s=args.duration))
    logger.info(
        "Exit %d: %d pairs sampled, %d frames drawn, %d pairs dropped",
        outcome.exit_code,
        handles.producer.cycles,
        handles.consumer.frames,
        handles.channel.dropped,
    )
    return outcome.exit_code


__all__ = ["main"]
