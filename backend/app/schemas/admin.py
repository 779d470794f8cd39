from pydantic import BaseModel
from typing import Optional


class MaintenanceRequest(BaseModel):
    action: str = ""


class RouteDecisionResponse(BaseModel):
    path: str
    render: bool
    page: Optional[str] = None
    redirect_to: Optional[str] = None
