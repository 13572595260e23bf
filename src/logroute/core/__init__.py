"""
logroute.core

Core domain types shared by enrichment, routing and sinks.

Responsibilities:
- Severity levels and their console bucket mapping.
- The per-call `LogEvent` record.
"""

# Package marker; types are imported directly from submodules.
