"""
logroute.observability

Observability package.

Responsibilities:
- Structured logging configuration for diagnostics.
- Request context capture (request ids, environment snapshot, console relay header).
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Keep imports out of this file: `logging` is imported by the enrichment core and
# `middleware` pulls in starlette.
