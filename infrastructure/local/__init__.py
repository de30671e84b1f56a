"""Device-local storage adapters."""

from infrastructure.local.file_store import FileDeviceStore

__all__ = ["FileDeviceStore"]
