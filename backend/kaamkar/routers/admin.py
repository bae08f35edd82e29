import os
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from .. import deps
from ..auth import current_user_id
from ..config import settings
from ..indexes import IndexSpec
from ..schemas import DebugStateResponse, EnvCheckResponse, EnvVarStatus, IndexDeclare, IndexResponse

router = APIRouter(tags=["admin"])

CHECKED_ENV_VARS = (
    "GEMINI_API_KEY",
    "GEMINI_MODELS",
    "STORAGE_BACKEND",
    "DATABASE_URL",
    "ENFORCE_INDEXES",
    "LOG_LEVEL",
)


def env_var_status(name: str, value: str | None) -> EnvVarStatus:
    """Presence and a redacted preview; secrets keep only three characters at each end."""
    if not value:
        return EnvVarStatus(exists=False)
    if "KEY" in name or "SECRET" in name:
        preview = f"{value[:3]}...{value[-3:]}"
    else:
        preview = f"{value[:10]}..." if len(value) > 10 else value
    return EnvVarStatus(exists=True, length=len(value), preview=preview)


@router.get("/env-check", response_model=EnvCheckResponse)
def env_check() -> EnvCheckResponse:
    return EnvCheckResponse(
        status="success",
        envVars={name: env_var_status(name, os.getenv(name)) for name in CHECKED_ENV_VARS},
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/debug/state", response_model=DebugStateResponse)
def debug_state(user_id: str = Depends(current_user_id)) -> DebugStateResponse:
    return DebugStateResponse(
        backend=settings.storage_backend,
        counts=deps.store.counts(),
        indexes=len(deps.store.list_indexes()),
    )


@router.get("/admin/indexes", response_model=list[IndexResponse])
def list_indexes(
    collection: str | None = None,
    fields: str | None = None,
    user_id: str = Depends(current_user_id),
) -> list[IndexResponse]:
    """Declared composite indexes, optionally narrowed to the one a remediation link names."""
    specs = deps.store.list_indexes()
    if collection:
        specs = [s for s in specs if s.collection == collection]
    if fields:
        wanted = tuple(f.strip() for f in fields.split(",") if f.strip())
        specs = [s for s in specs if s.fields == wanted]
    return [IndexResponse(collection=s.collection, fields=list(s.fields)) for s in specs]


@router.post("/admin/indexes", response_model=IndexResponse, status_code=201)
def declare_index(payload: IndexDeclare, user_id: str = Depends(current_user_id)) -> IndexResponse:
    spec = IndexSpec(payload.collection, tuple(payload.fields))
    deps.store.declare_index(spec)
    return IndexResponse(collection=spec.collection, fields=list(spec.fields))
