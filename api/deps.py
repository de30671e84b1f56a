"""
FastAPI Dependency Providers for the training API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) or use cases built on them. Tests override the
record store and capability resolver providers with in-memory fakes, and
every use case picks the override up.

Architecture:
- Settings and Supabase client are cached per-process (lru_cache)
- Record store, resolver and use cases are created per-request
- Auth providers wrap backend.auth

Usage in routers:
    from api.deps import get_current_user, get_calendar_service

    @router.get("/athletes/{athlete_id}/routine")
    def active_routine(
        athlete_id: str,
        user_id: str = Depends(get_current_user),
        service: CalendarService = Depends(get_calendar_service),
    ):
        return service.get_active_routine(athlete_id)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_record_store] = lambda: FakeRecordStore()
"""

from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header
from supabase import Client, create_client

# Protocol types (interfaces)
from application.ports import Capabilities, CapabilityResolver, RecordStore

# Use cases and services
from application.use_cases import (
    AssignRoutineUseCase,
    GetTrainingHistoryUseCase,
    LogRetroactiveWorkoutUseCase,
    ManageTemplatesUseCase,
    RecordTrainingLogUseCase,
)
from backend.core.calendar_service import CalendarService
from backend.core.progression_service import ProgressionRules, ProgressionService

# Concrete implementations
from infrastructure.db import ProfileCapabilityResolver, SupabaseRecordStore

from backend.settings import Settings, get_settings as _get_settings

# Auth from existing module (wrap to maintain single source of truth)
from backend.auth import get_current_user as _get_current_user


# =============================================================================
# Settings Provider
# =============================================================================


def get_settings() -> Settings:
    """
    Get application settings.

    Returns cached Settings instance from backend.settings.

    Returns:
        Settings: Application settings instance
    """
    return _get_settings()


# =============================================================================
# Supabase Client Provider
# =============================================================================


@lru_cache
def get_supabase_client() -> Optional[Client]:
    """
    Get Supabase client instance (cached).

    Returns:
        Client: Supabase client instance, or None if not configured
    """
    settings = _get_settings()

    if not settings.supabase_url or not settings.supabase_key:
        return None

    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase_client_required() -> Client:
    """
    Get Supabase client instance, raising if not configured.

    Raises:
        HTTPException: 503 if Supabase is not configured
    """
    from fastapi import HTTPException

    client = get_supabase_client()
    if client is None:
        raise HTTPException(
            status_code=503,
            detail="Database not available. Supabase credentials not configured.",
        )
    return client


# =============================================================================
# Port Providers
# =============================================================================


def get_record_store(
    client: Client = Depends(get_supabase_client_required),
) -> RecordStore:
    """
    Get RecordStore implementation.

    Args:
        client: Supabase client (injected)

    Returns:
        RecordStore: Document store for routines and training records
    """
    return SupabaseRecordStore(client)


def get_capability_resolver(
    store: RecordStore = Depends(get_record_store),
) -> CapabilityResolver:
    """Get the CapabilityResolver implementation (profile roles)."""
    return ProfileCapabilityResolver(store)


# =============================================================================
# Authentication Providers
# =============================================================================


async def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> str:
    """
    Get the current authenticated user ID.

    Wraps backend.auth.get_current_user for dependency injection.

    Raises:
        HTTPException: 401 if authentication fails
    """
    return await _get_current_user(authorization=authorization, x_api_key=x_api_key)


def get_current_capabilities(
    user_id: str = Depends(get_current_user),
    resolver: CapabilityResolver = Depends(get_capability_resolver),
) -> Capabilities:
    """Resolve the current user's capabilities once per request."""
    return resolver.resolve(user_id)


# =============================================================================
# Use Case and Service Providers
# =============================================================================


def get_assign_routine_use_case(
    store: RecordStore = Depends(get_record_store),
) -> AssignRoutineUseCase:
    return AssignRoutineUseCase(record_store=store)


def get_templates_use_case(
    store: RecordStore = Depends(get_record_store),
) -> ManageTemplatesUseCase:
    return ManageTemplatesUseCase(record_store=store)


def get_record_training_log_use_case(
    store: RecordStore = Depends(get_record_store),
) -> RecordTrainingLogUseCase:
    return RecordTrainingLogUseCase(record_store=store)


def get_retroactive_use_case(
    record_use_case: RecordTrainingLogUseCase = Depends(get_record_training_log_use_case),
) -> LogRetroactiveWorkoutUseCase:
    return LogRetroactiveWorkoutUseCase(record_training_log=record_use_case)


def get_training_history_use_case(
    store: RecordStore = Depends(get_record_store),
) -> GetTrainingHistoryUseCase:
    return GetTrainingHistoryUseCase(record_store=store)


def get_progression_service(
    store: RecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_settings),
) -> ProgressionService:
    """
    Get ProgressionService with thresholds from settings.

    Args:
        store: Record store (injected)
        settings: Application settings (injected)
    """
    rules = ProgressionRules(
        increment=settings.progression_increment,
        increase_max_rpe=settings.progression_increase_max_rpe,
        consolidate_min_rpe=settings.progression_consolidate_min_rpe,
        history_window=settings.progression_history_window,
    )
    return ProgressionService(record_store=store, rules=rules)


def get_calendar_service(
    store: RecordStore = Depends(get_record_store),
) -> CalendarService:
    return CalendarService(record_store=store)


# =============================================================================
# Exports
# =============================================================================

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
    # Use cases and services
    "get_assign_routine_use_case",
    "get_templates_use_case",
    "get_record_training_log_use_case",
    "get_retroactive_use_case",
    "get_training_history_use_case",
    "get_progression_service",
    "get_calendar_service",
]
