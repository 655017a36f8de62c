from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from typing import Any, Callable, Dict, Optional
import os
import logging
from contextlib import asynccontextmanager

from inquiry_email import ContactData, build_inquiry_email
from mail_sender import MailSender, ResendMailSender
from relay_settings import Settings, load_settings

logger = logging.getLogger(__name__)

SenderFactory = Callable[[str, str], MailSender]


class Submission(BaseModel):
    form_name: str
    data: Dict[str, Any]
    created_at: str


class SubmissionEvent(BaseModel):
    payload: Submission


def create_app(
    settings: Settings, sender_factory: Optional[SenderFactory] = None
) -> FastAPI:
    make_sender = sender_factory or ResendMailSender

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "✅ Relaying '%s' submissions to %s", settings.form_name, settings.to_address
        )
        if not settings.api_key:
            logger.warning("⚠️ Provider API key is not set, submissions will fail")
        yield

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings

    async def handle(request: Request) -> PlainTextResponse:
        if not settings.api_key:
            logger.error("❌ Provider API key missing, cannot send email")
            return PlainTextResponse("Email service not configured", status_code=500)

        try:
            event = SubmissionEvent.model_validate(await request.json())
            submission = event.payload

            if submission.form_name != settings.form_name:
                logger.info("⏭️ Ignoring submission from form '%s'", submission.form_name)
                return PlainTextResponse("OK", status_code=200)

            data = ContactData.model_validate(submission.data)
            message = build_inquiry_email(data, submission.created_at, settings)

            logger.info("📨 Sending inquiry from %s <%s>", data.name, data.email)
            sender = make_sender(settings.api_key, settings.api_url)
            result = await sender.send(message)

            if not result.ok:
                logger.error(
                    "❌ Provider rejected email (status %s): %s", result.status, result.body
                )
                return PlainTextResponse("Failed to send email", status_code=500)

            logger.info("✅ Inquiry email sent for %s", data.email)
            return PlainTextResponse("Email sent", status_code=200)

        except Exception as e:
            logger.exception("❌ Failed to process submission: %s", str(e))
            return PlainTextResponse("Internal server error", status_code=500)

    app.add_api_route("/", handle, methods=["POST"])
    app.add_api_route("/api/v1/submission-created", handle, methods=["POST"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "configured": bool(settings.api_key)}

    return app


settings = load_settings()
logging.basicConfig(level=settings.log_level.upper())
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "form_handler:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
    )
