from pydantic import BaseModel


class PeriodOut(BaseModel):
    id: str
    label: str
    start: str
    end: str
    display: str | None = None
    is_break: bool

    model_config = {"from_attributes": True}
