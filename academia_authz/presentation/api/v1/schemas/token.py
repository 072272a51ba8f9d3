from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """Bearer token claims identifying the calling principal"""

    sub: str = Field(..., description="Principal ID (subject)")
    tenant_id: str = Field(..., description="Tenant ID the principal belongs to")
    exp: int | None = Field(None, description="Token expiration timestamp")

    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {"sub": "principal_123", "tenant_id": "tenant_abc", "exp": 1234567890}
        },
    )
