from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContactSubmission(BaseModel):
    """
    Decoded body of a contact form POST.

    Every field is optional at the schema level: the endpoint reports
    missing values itself with its own 400 message instead of a 422.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    name: str | None = Field(default=None, examples=["Jane Doe"])
    email: str | None = Field(default=None, examples=["jane@example.com"])
    project_type: str | None = Field(default=None, alias="projectType", examples=["Website"])
    budget: str | None = Field(default=None, examples=["$5k - $10k"])
    message: str | None = Field(default=None, examples=["I would like a new portfolio site."])
    honeypot: str | None = Field(default=None, description="Hidden field, must stay empty")

    @classmethod
    def from_payload(cls, payload: Any) -> "ContactSubmission":  # noqa: ANN401
        """
        Build a submission from any decoded JSON value.

        Non-object bodies and non-scalar field values are treated as absent,
        except for the honeypot: any filled-in value there counts, whatever
        its JSON type.
        """
        if not isinstance(payload, dict):
            return cls()
        scalars = {
            key: value
            for key, value in payload.items()
            if isinstance(value, str | int | float)
            and not isinstance(value, bool)
            and key != "honeypot"
        }
        honeypot = payload.get("honeypot")
        # JavaScript truthiness: empty arrays and objects count as filled in
        if honeypot is not None and honeypot != "" and honeypot != 0:
            scalars["honeypot"] = honeypot if isinstance(honeypot, str) else str(honeypot)
        return cls.model_validate(scalars)


class SanitizedSubmission(BaseModel):
    """Display copies of a validated submission, safe to embed in mail bodies."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    project_type: str
    budget: str
    message_text: str
    message_html: str
    reply_to: str = Field(..., description="Raw submitter address, envelope use only")


class ContactResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str = Field(..., examples=["Invalid email format"])
