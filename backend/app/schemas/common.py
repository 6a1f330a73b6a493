"""
공통 Pydantic 스키마
"""

from datetime import datetime
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    db_connected: bool
    timestamp: datetime
