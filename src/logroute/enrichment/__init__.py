"""
logroute.enrichment

Event enrichment package.

Responsibilities:
- Call-site discovery and backtrace capture (`backtrace`).
- Request environment snapshots (`request_context`).
- Event population (`enricher`).
"""

# Package marker.
