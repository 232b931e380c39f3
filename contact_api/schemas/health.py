from pydantic import BaseModel, Field


class HealthCheckResponse(BaseModel):
    """Health check payload."""

    version: str = Field(..., examples=["1.0.0"])
    status: str = Field(default="ok")
    timestamp: str = Field(..., examples=["2025-01-01 12:00:00"])
    environment: str = Field(..., examples=["production"])
    email_client: str = Field(..., examples=["configured"])
    rate_limit_records: int = Field(..., ge=0)
    security_events: int = Field(..., ge=0)
