"""
Service layer sitting between the HTTP surface and the adapters.
"""

from datagate.services.data import DataService

__all__ = ["DataService"]
