"""
Domain Services Package

Architectural Intent:
- Contains domain services implementing deployment logic that does not
  belong to a single entity
"""

from dockhand.domain.services.health_polling import (
    HealthPoller,
    HealthReport,
)

__all__ = [
    "HealthPoller",
    "HealthReport",
]
