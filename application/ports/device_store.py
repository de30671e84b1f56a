"""
Device-local durable store (Port).

Key/value blobs scoped to one device. Used for session resumability and the
offline retry queue, never for anything shared between devices.
"""
from typing import Optional, Protocol


class DeviceStore(Protocol):
    """Durable key/value storage local to the device running a session."""

    def get(self, key: str) -> Optional[str]:
        """Return the blob stored under key, or None."""
        ...

    def set(self, key: str, blob: str) -> None:
        """Store blob under key, replacing any previous value."""
        ...

    def remove(self, key: str) -> None:
        """Delete key. Removing a missing key is not an error."""
        ...
