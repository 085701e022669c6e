from typing import Any, Optional
from pydantic import BaseModel, Field


class AgentData(BaseModel):
    name: str = Field(..., min_length=1)
    type: Optional[str] = None
    description: Optional[str] = None
    configuration: Optional[dict[str, Any]] = None


class DeployRequest(BaseModel):
    agent_id: Optional[str] = Field(None, alias="agentId")
    agent_data: Optional[AgentData] = Field(None, alias="agentData")

    model_config = {"populate_by_name": True}


class AgentRef(BaseModel):
    agent_id: str = Field(..., alias="agentId")

    model_config = {"populate_by_name": True, "coerce_numbers_to_str": True}


class DeleteResult(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    function: str = "agent-deployment"
    version: str = "1.0.0"
