"""
Interfaces (Ports) for the training core.

This package defines the abstract collaborators the core depends on. Concrete
implementations live in infrastructure/ (Supabase, local files, HTTP).

Architecture follows the Ports & Adapters (Hexagonal) pattern:
- Ports: Abstract interfaces defined here (what the core needs)
- Adapters: Concrete implementations in infrastructure/ (how it's provided)

Usage:
    from application.ports import RecordStore, BatchOp

    class AssignRoutineUseCase:
        def __init__(self, record_store: RecordStore):
            self._store = record_store
"""

# Generic document store
from application.ports.record_store import (
    RecordStore,
    BatchOp,
    OrderBy,
    Filter,
    FILTER_OPERATORS,
)

# Device-local storage
from application.ports.device_store import DeviceStore

# Capability resolution
from application.ports.capabilities import Capabilities, CapabilityResolver

# Finalized session sink
from application.ports.training_log_writer import TrainingLogWriter

__all__ = [
    # Record store
    "RecordStore",
    "BatchOp",
    "OrderBy",
    "Filter",
    "FILTER_OPERATORS",
    # Device store
    "DeviceStore",
    # Capabilities
    "Capabilities",
    "CapabilityResolver",
    # Training logs
    "TrainingLogWriter",
]
