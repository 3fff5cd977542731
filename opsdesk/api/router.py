"""
Main API router
"""
from fastapi import APIRouter

from opsdesk.api.v1 import (
    health,
    version,
    auth,
    users,
    attendance,
    task_archive,
    tasks,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(version.router, tags=["version"])
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["attendance"])
# Must precede the tasks router: GET /tasks/archive would otherwise match /tasks/{task_id}
api_router.include_router(task_archive.router, prefix="/tasks/archive", tags=["task-archive"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
