"""Plain-text and HTML bodies for the two mails sent per accepted submission."""

from contact_api.configs import NOT_SPECIFIED, Settings, settings
from contact_api.schemas.contact import SanitizedSubmission
from contact_api.schemas.email import MailMessage
from contact_api.utils.sanitize import html_text


def _or_default(value: str) -> str:
    return value or NOT_SPECIFIED


def notification_text(submission: SanitizedSubmission) -> str:
    return (
        f"Name: {submission.name}\n"
        f"Email: {submission.email}\n"
        f"Project Type: {_or_default(submission.project_type)}\n"
        f"Budget: {_or_default(submission.budget)}\n"
        f"Message: {submission.message_text}\n"
    )


def notification_html(submission: SanitizedSubmission) -> str:
    return f"""
    <h2>New Contact Form Submission</h2>
    <p><strong>Name:</strong> {html_text(submission.name)}</p>
    <p><strong>Email:</strong> {html_text(submission.email)}</p>
    <p><strong>Project Type:</strong> {html_text(_or_default(submission.project_type))}</p>
    <p><strong>Budget:</strong> {html_text(_or_default(submission.budget))}</p>
    <p><strong>Message:</strong></p>
    <p>{submission.message_html}</p>
    """


def auto_reply_text(submission: SanitizedSubmission, company: str) -> str:
    return (
        f"Dear {submission.name},\n\n"
        "Thank you for reaching out to us. We have received your message and will "
        "get back to you within 24 business hours.\n\n"
        "Here's a summary of your inquiry:\n"
        f"- Project Type: {_or_default(submission.project_type)}\n"
        f"- Budget: {_or_default(submission.budget)}\n"
        f"- Message: {submission.message_text}\n\n"
        "Best regards,\n"
        f"The {company} Team"
    )


def auto_reply_html(submission: SanitizedSubmission, company: str) -> str:
    return f"""
    <h2>Thank you for contacting {html_text(company)}</h2>
    <p>Dear {html_text(submission.name)},</p>
    <p>Thank you for reaching out to us. We have received your message and will get back to you within 24 business hours.</p>
    <p>Here's a summary of your inquiry:</p>
    <ul>
      <li><strong>Project Type:</strong> {html_text(_or_default(submission.project_type))}</li>
      <li><strong>Budget:</strong> {html_text(_or_default(submission.budget))}</li>
      <li><strong>Message:</strong> {submission.message_html}</li>
    </ul>
    <p>Best regards,<br>The {html_text(company)} Team</p>
    """


def build_notification(
    submission: SanitizedSubmission,
    config: Settings = settings,
) -> MailMessage:
    """Operator notification. Replies go straight to the submitter."""
    return MailMessage(
        sender=config.MAIL_FROM,
        to=config.CONTACT_RECIPIENT,
        reply_to=submission.reply_to,
        subject=f"New Contact Form Submission from {submission.name}",
        text=notification_text(submission),
        html=notification_html(submission),
    )


def build_auto_reply(
    submission: SanitizedSubmission,
    config: Settings = settings,
) -> MailMessage:
    """Acknowledgement sent to the submitter's raw address."""
    return MailMessage(
        sender=config.MAIL_FROM,
        to=submission.reply_to,
        subject=f"Thank you for contacting {config.COMPANY_NAME}",
        text=auto_reply_text(submission, config.COMPANY_NAME),
        html=auto_reply_html(submission, config.COMPANY_NAME),
    )
