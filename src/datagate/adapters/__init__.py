"""
Backend adapters implementing the CRUD capability interface.

This module provides an in-memory adapter and an async Supabase client.
"""

from datagate.adapters.base import DataAdapter
from datagate.adapters.memory import InMemoryAdapter
from datagate.adapters.supabase import SupabaseAdapter

__all__ = [
    "DataAdapter",
    "InMemoryAdapter",
    "SupabaseAdapter",
]
