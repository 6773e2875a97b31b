"""
Session Maintenance Use Cases
"""

from .cleanup_sessions_use_case import CleanupSessionsUseCase

__all__ = ["CleanupSessionsUseCase"]
