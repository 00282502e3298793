"""uv-run: run Python selections, functions and files through uv.

Turns an editor selection or a chosen top-level function into a small,
self-contained script, stages it in a fixed location and hands it to a
subprocess runner.
"""

__version__ = "0.1.0"
