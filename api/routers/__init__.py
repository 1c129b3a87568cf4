"""API routers package.

- admin: dashboard overview, archived daily stats, manual job runs
- content: view recording for content items
- health: liveness and Redis health
"""

# Note: Routers are imported directly in api/app.py to avoid circular imports

__all__ = [
    "admin",
    "content",
    "health",
]
