"""System maintenance endpoints (unauthenticated, dev only)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_app_settings
from app.core.config import Settings
from app.core.database import get_db
from app.core.exceptions import BadRequestError, ForbiddenError
from app.schemas.system import SeedResponse
from app.services.users import seed_admin_user

router = APIRouter()


@router.post("/seed-data", response_model=SeedResponse)
def seed_data(
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> SeedResponse:
    """
    Create the initial admin account from SEED_ADMIN_USERNAME / SEED_ADMIN_PASSWORD.
    Idempotent: returns created=false when the account already exists.
    """
    if settings.APP_ENV == "prod":
        raise ForbiddenError("Seeding is disabled in production")
    if settings.SEED_ADMIN_PASSWORD is None:
        raise BadRequestError(["SEED_ADMIN_PASSWORD is not configured"])
    created = seed_admin_user(db, settings)
    return SeedResponse(created=created)
