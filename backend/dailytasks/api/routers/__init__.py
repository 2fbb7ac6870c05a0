from fastapi import APIRouter

from dailytasks.api.routers.assignments import router as assignments_router
from dailytasks.api.routers.completions import router as completions_router
from dailytasks.api.routers.occurrences import router as occurrences_router
from dailytasks.api.routers.task_templates import router as task_templates_router


api_router = APIRouter()
api_router.include_router(task_templates_router, prefix="/task-templates", tags=["task-templates"])
api_router.include_router(assignments_router, prefix="/assignments", tags=["assignments"])
api_router.include_router(completions_router, prefix="/completions", tags=["completions"])
api_router.include_router(occurrences_router, prefix="/occurrences", tags=["occurrences"])
