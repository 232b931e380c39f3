from pydantic import BaseModel, ConfigDict, Field


class MailMessage(BaseModel):
    """One outbound email. Immutable once built, never persisted."""

    model_config = ConfigDict(frozen=True)

    sender: str = Field(..., description="From header")
    to: str = Field(..., description="Recipient address")
    subject: str
    text: str = Field(..., description="Plain-text alternative")
    html: str = Field(..., description="HTML alternative")
    reply_to: str | None = Field(default=None, description="Reply-To header")
