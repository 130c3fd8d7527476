"""Sample sources for the monitor.

:mod:`shtc3` talks to the Sensirion SHTC3 over I2C; :mod:`synthetic`
generates plausible readings when no sensor is attached. Both expose
``measure(mode) -> Measurement`` and ``close()``.
"""
