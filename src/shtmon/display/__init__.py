"""Renderers consumed by the render loop.

A renderer exposes ``draw(plot_data)`` and ``close()``. :mod:`chart` draws
live Matplotlib charts; :mod:`console` logs the newest values for headless
use (e.g. over SSH on the Pi).
"""
