from typing import Any, Optional
from pydantic import BaseModel, Field


class AlertFilters(BaseModel):
    is_read: Optional[bool] = None
    type: Optional[str] = None
    severity: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1)


class AlertQuery(BaseModel):
    filters: Optional[AlertFilters] = None


class AlertData(BaseModel):
    agent_id: Optional[str] = None
    title: str = Field(..., min_length=1)
    message: Optional[str] = None
    type: Optional[str] = None
    severity: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class CreateAlertRequest(BaseModel):
    alert_data: AlertData = Field(..., alias="alertData")

    model_config = {"populate_by_name": True}


class AlertRef(BaseModel):
    alert_id: str = Field(..., alias="alertId")

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class EmptyPayload(BaseModel):
    pass


class ActionResult(BaseModel):
    success: bool = True
    message: str


class UnreadCount(BaseModel):
    unread_count: int


class HealthResponse(BaseModel):
    status: str = "ok"
    function: str = "alert-processor"
    version: str = "1.0.0"
