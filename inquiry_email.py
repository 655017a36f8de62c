import re
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from mail_sender import OutboundEmail
from relay_settings import Settings

EASTERN = ZoneInfo("America/New_York")
FRACTION = re.compile(r"\.(\d+)")
NOT_SPECIFIED = "Not specified"

SERVICE_LABELS = MappingProxyType({
    "java": "Java development",
    "python": "Python development",
    "web": "Web development",
    "mobile": "Mobile app development",
    "cloud": "Cloud & DevOps",
    "consulting": "Technical consulting",
    "other": "Other",
})

BUDGET_LABELS = MappingProxyType({
    "under-5k": "Under $5,000",
    "5k-10k": "$5,000 - $10,000",
    "10k-25k": "$10,000 - $25,000",
    "25k-50k": "$25,000 - $50,000",
    "50k-plus": "$50,000+",
})


class ContactData(BaseModel):
    name: str
    email: str
    service: str
    message: str
    budget: Optional[str] = None
    subject: Optional[str] = None


def resolve_service(code: str) -> str:
    return SERVICE_LABELS.get(code, code)


def resolve_budget(code: Optional[str]) -> str:
    if not code:
        return NOT_SPECIFIED
    return BUDGET_LABELS.get(code, code)


def format_submitted_at(created_at: str) -> str:
    """Render an ISO-8601 timestamp as e.g. 'Monday, January 1, 2024 at 7:00 AM' (US Eastern)."""
    value = created_at.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fraction digits
    value = FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    local = parsed.astimezone(EASTERN)

    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return (
        f"{local:%A}, {local:%B} {local.day}, {local.year} "
        f"at {hour}:{local:%M} {meridiem}"
    )


def render_html(
    data: ContactData, service_label: str, budget_label: str, submitted_at: str
) -> str:
    # message is embedded as-is, see DESIGN.md
    subject_row = ""
    if data.subject:
        subject_row = f"""
            <tr><td style="padding: 6px 12px; font-weight: bold;">Subject</td><td style="padding: 6px 12px;">{data.subject}</td></tr>"""

    return f"""
    <html>
    <body style="font-family: Arial, sans-serif; color: #222;">
        <h2 style="color: #1a4d8f;">New Contact Inquiry</h2>
        <table style="border-collapse: collapse;">
            <tr><td style="padding: 6px 12px; font-weight: bold;">Name</td><td style="padding: 6px 12px;">{data.name}</td></tr>
            <tr><td style="padding: 6px 12px; font-weight: bold;">Email</td><td style="padding: 6px 12px;"><a href="mailto:{data.email}">{data.email}</a></td></tr>
            <tr><td style="padding: 6px 12px; font-weight: bold;">Service</td><td style="padding: 6px 12px;">{service_label}</td></tr>
            <tr><td style="padding: 6px 12px; font-weight: bold;">Budget</td><td style="padding: 6px 12px;">{budget_label}</td></tr>
            <tr><td style="padding: 6px 12px; font-weight: bold;">Submitted</td><td style="padding: 6px 12px;">{submitted_at}</td></tr>{subject_row}
        </table>
        <p><strong>Message:</strong></p>
        <div style="background-color: #f5f5f5; padding: 15px; border-left: 4px solid #1a4d8f; margin: 10px 0; white-space: pre-wrap;">{data.message}</div>
        <hr>
        <p><em>Reply to this email to respond directly to {data.name}.</em></p>
    </body>
    </html>
    """


def render_text(
    data: ContactData, service_label: str, budget_label: str, submitted_at: str
) -> str:
    lines = [
        "New Contact Inquiry",
        "",
        f"Name: {data.name}",
        f"Email: {data.email}",
        f"Service: {service_label}",
        f"Budget: {budget_label}",
        f"Submitted: {submitted_at}",
    ]
    if data.subject:
        lines.append(f"Subject: {data.subject}")
    lines += [
        "",
        "Message:",
        data.message,
        "",
        f"Reply to this email to respond directly to {data.name}.",
    ]
    return "\n".join(lines)


def build_inquiry_email(
    data: ContactData, created_at: str, settings: Settings
) -> OutboundEmail:
    service_label = resolve_service(data.service)
    budget_label = resolve_budget(data.budget)
    submitted_at = format_submitted_at(created_at)

    return OutboundEmail(
        from_=settings.from_address,
        to=[settings.to_address],
        reply_to=data.email,
        subject=f"New inquiry from {data.name} - {service_label}",
        html=render_html(data, service_label, budget_label, submitted_at),
        text=render_text(data, service_label, budget_label, submitted_at),
    )
