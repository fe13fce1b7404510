from fastapi import APIRouter, Depends

from app.api.deps import get_catalog
from app.api.schemas.booking import ProcedureInfo
from app.core.catalog import Catalog

router = APIRouter(prefix="/procedures", tags=["procedures"])


@router.get("", response_model=list[ProcedureInfo])
async def list_procedures(catalog: Catalog = Depends(get_catalog)) -> list[ProcedureInfo]:
    """Bookable procedures, sorted by name."""
    return [
        ProcedureInfo(
            name=p.name,
            professional_id=p.professional_id,
            duration_minutes=p.duration_minutes,
        )
        for p in catalog.procedures()
    ]
