"""
Infrastructure Database Layer.

This package provides Supabase-backed implementations of the interfaces
defined in application.ports.

Usage:
    from supabase import create_client
    from infrastructure.db import SupabaseRecordStore, ProfileCapabilityResolver

    # Create Supabase client
    client = create_client(SUPABASE_URL, SUPABASE_KEY)

    # Instantiate adapters with injected client
    store = SupabaseRecordStore(client)
    resolver = ProfileCapabilityResolver(store)
"""

from infrastructure.db.record_store import SupabaseRecordStore
from infrastructure.db.capability_resolver import (
    ProfileCapabilityResolver,
    ROLE_CAPABILITIES,
)

__all__ = [
    "SupabaseRecordStore",
    "ProfileCapabilityResolver",
    "ROLE_CAPABILITIES",
]
