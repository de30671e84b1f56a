"""
Infrastructure Layer for the training core.

This package contains concrete implementations of the application ports:
- db/: Supabase record store and profile-based capability resolver
- local/: File-backed device store for sessions and the offline queue
- http/: Training log sync client used by devices
"""

# Re-export adapters for convenient access
from infrastructure.db import (
    SupabaseRecordStore,
    ProfileCapabilityResolver,
)
from infrastructure.local import FileDeviceStore
from infrastructure.http import HttpTrainingLogClient

__all__ = [
    "SupabaseRecordStore",
    "ProfileCapabilityResolver",
    "FileDeviceStore",
    "HttpTrainingLogClient",
]
