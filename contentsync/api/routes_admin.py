from fastapi import APIRouter, Request

from contentsync.db.migrations import apply_sql_migrations

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/migrate")
def migrate(request: Request) -> dict:
    settings = request.app.state.settings
    result = apply_sql_migrations(settings)
    return {"applied": result.applied, "skipped": result.skipped}
