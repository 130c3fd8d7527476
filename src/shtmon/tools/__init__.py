"""Development helpers: opt-in timing instrumentation enabled by ``SHTMON_DEBUG``."""
