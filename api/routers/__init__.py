"""
API Routers for the training service.

Each router handles a specific domain of endpoints:
- health: Health check endpoints
- routines: Template CRUD, assignment and active routine
- schedule: Athlete calendar classification
- progression: Load suggestions and personal records
- training_logs: Finalized sessions, retroactive logs, history
"""

from api.routers.health import router as health_router
from api.routers.routines import router as routines_router
from api.routers.schedule import router as schedule_router
from api.routers.progression import router as progression_router
from api.routers.training_logs import router as training_logs_router

__all__ = [
    "health_router",
    "routines_router",
    "schedule_router",
    "progression_router",
    "training_logs_router",
]
