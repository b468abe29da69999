from fastapi import APIRouter, Depends

from timegrid.api.deps import get_current_user
from timegrid.models.user import User
from timegrid.schemas.period import PeriodOut
from timegrid.services.periods import get_period_table

router = APIRouter()


@router.get("/periods", response_model=list[PeriodOut])
def list_periods(current_user: User = Depends(get_current_user)) -> list[PeriodOut]:
    # Validated explicitly so the computed ``label`` is included.
    return [PeriodOut.model_validate(period) for period in get_period_table()]
