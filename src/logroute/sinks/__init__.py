"""
logroute.sinks

Output writers for enriched events.

Responsibilities:
- Sink contract and severity filters (`base`, `filters`).
- Structured stream, browser-console relay and database sinks.
"""

# Package marker; sinks are imported directly from submodules.
