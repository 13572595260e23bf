"""
logroute.routing

Target routing package.

Responsibilities:
- Rule parsing and caching (`rules`).
- Ordered filename matching (`router`).
"""

# Package marker.
