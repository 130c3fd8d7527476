"""Configuration objects and helpers for shtmon.

Settings come from an optional YAML file (see ``monitor.example.yaml``)
with command-line overrides applied on top. The resulting
:class:`MonitorConfig` is fixed for the lifetime of the pipeline.
"""

from .runtime import MonitorConfig, config_from_mapping, load_config

__all__ = ["MonitorConfig", "config_from_mapping", "load_config"]
