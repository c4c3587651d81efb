# wedding_rsvp/routers/dashboard.py
# =============================================================================
# 📊 Rutas de resumen del organizador (solo lectura, sin caché)
# =============================================================================

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from wedding_rsvp import reports, schemas
from wedding_rsvp.core.security import get_current_organizer
from wedding_rsvp.db import get_db
from wedding_rsvp.models import Organizer

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=schemas.DashboardStats)
def get_stats(
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    return reports.dashboard_stats(db, organizer.id)


@router.get("/responses", response_model=schemas.ResponsesSummary)
def get_responses(
    filter: schemas.ResponseFilter = Query(default="all"),
    db: Session = Depends(get_db),
    organizer: Organizer = Depends(get_current_organizer),
):
    return reports.responses_summary(db, organizer.id, filter)
