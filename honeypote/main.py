"""FastAPI entry point. Wires sanitize -> extract -> reply -> finalize ->
callback. Exposes GET / (health) and POST /honey-pote (conversation endpoint)."""

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from honeypote import config
from honeypote.agent import select_reply
from honeypote.audit import log_event
from honeypote.callback import evaluate_finalization, send_callback_async
from honeypote.extractor import extract_intelligence
from honeypote.memory import finalized_sessions
from honeypote.models import HoneypotRequest, HoneypotResponse
from honeypote.sanitizer import sanitize

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

ENDPOINT = "/honey-pote"
FALLBACK_REPLY = "Sorry, I didn't catch that. Can you please repeat?"

app = FastAPI(
    title="Agentic Honey-Pot API",
    description="Scripted victim replies and scam intelligence extraction",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
async def _on_startup() -> None:
    logger.info(f"Agentic Scam HoneyPot running on port {config.PORT}")


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"status": "error", "message": message})


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Unparsable bodies: 400 in strict mode, otherwise a normal victim reply."""
    logger.warning(f"Malformed payload on {request.url.path}: {exc.errors()}")
    if config.STRICT_VALIDATION:
        return _bad_request("Invalid request payload.")
    await run_in_threadpool(log_event, "incoming_message", sessionId="", message="", turns=1)
    return JSONResponse(
        status_code=200,
        content=HoneypotResponse(status="success", reply=select_reply("")).model_dump(),
    )


@app.get("/")
def health_check() -> dict:
    response = {
        "status": "Agentic Honeypot Running",
        "platform": "Render",
        "endpoint": ENDPOINT,
    }
    log_event("health_check", response=response)
    return response


@app.post(ENDPOINT, response_model=HoneypotResponse)
def process_message(request: HoneypotRequest):
    """Answer one scammer message and finalize the session when ready."""
    session_id = ""
    try:
        session_id = sanitize(request.sessionId)
        incoming = sanitize(request.message.text)

        if config.STRICT_VALIDATION and not (session_id and incoming):
            logger.warning("Rejected request: missing sessionId or message text")
            return _bad_request("sessionId and message.text are required.")

        history = [sanitize(turn.text) for turn in request.conversationHistory]
        history.append(incoming)
        turns = len(history)

        intel = extract_intelligence(history)
        reply = select_reply(incoming)

        log_event(
            "incoming_message",
            sessionId=session_id,
            message=incoming,
            turns=turns,
        )

        report = evaluate_finalization(session_id, intel, turns, finalized_sessions)
        if report is not None:
            logger.info(f"[{session_id[:8]}] FINAL  turns={turns}")
            log_event("FINAL_RESULT", data=report.model_dump())
            send_callback_async(report)

        return HoneypotResponse(status="success", reply=reply)

    except Exception as exc:
        logger.error(
            f"[{session_id[:8] if session_id else 'UNKNOWN'}] "
            f"Unhandled error in process_message: {exc}",
            exc_info=True,
        )
        return HoneypotResponse(status="success", reply=FALLBACK_REPLY)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
