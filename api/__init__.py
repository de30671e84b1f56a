"""
API package for the training service.

This package contains:
- deps.py: FastAPI dependency providers for DI
- errors.py: Core error to HTTP status translation
- schemas/: Request and response models
- routers/: API route handlers
"""

# Re-export dependency providers for convenient access
from api.deps import (
    get_settings,
    get_supabase_client,
    get_supabase_client_required,
    get_record_store,
    get_capability_resolver,
    get_current_user,
    get_current_capabilities,
)

__all__ = [
    # Settings
    "get_settings",
    # Database
    "get_supabase_client",
    "get_supabase_client_required",
    # Ports
    "get_record_store",
    "get_capability_resolver",
    # Authentication
    "get_current_user",
    "get_current_capabilities",
]
