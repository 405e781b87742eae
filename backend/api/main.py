"""FastAPI service: the send-crisis-alert dispatch endpoint (email via Resend, SMS via Twilio)."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from crisis_alerts import config
from crisis_alerts.alerts.validators import is_valid_email
from crisis_alerts.dispatch import EmailDeliveryError, ProviderConfig, ProviderRuntime, handle_dispatch
from crisis_alerts.schemas.dispatch import DispatchRequest

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    runtime = ProviderRuntime(ProviderConfig.from_env())
    # Verification starts now; the first SMS dispatch awaits its result
    runtime.start()
    app.state.providers = runtime
    try:
        yield
    finally:
        await runtime.aclose()


def get_providers(request: Request) -> ProviderRuntime:
    return request.app.state.providers


def require_api_key(x_api_key: str | None = Header(None, alias="X-API-Key")) -> None:
    """Validate X-API-Key header when ALERTS_API_KEY is configured."""
    if config.ALERTS_API_KEY and x_api_key != config.ALERTS_API_KEY:
        raise HTTPException(401, "Invalid API key")


app = FastAPI(title="Crisis Alerts API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    # Browsers refuse credentialed requests against a wildcard origin
    allow_credentials="*" not in config.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
)


@app.get("/health")
async def health(providers: ProviderRuntime = Depends(get_providers)):
    """Health check, including the verified SMS provider state."""
    sms = await providers.sms_state()
    return {
        "status": "ok",
        "email_configured": providers.config.email_configured,
        "sms": {"configured": sms.configured, "error_message": sms.error_message},
    }


@app.post(f"/functions/v1/{config.DISPATCH_FUNCTION_NAME}")
async def send_crisis_alert(
    body: DispatchRequest,
    _: None = Depends(require_api_key),
    providers: ProviderRuntime = Depends(get_providers),
):
    """
    Dispatch one crisis alert.

    Body: DispatchRequest (camelCase). Returns { "email": ..., "sms": ... | null }.
    """
    if not is_valid_email(body.email):
        raise HTTPException(400, "Invalid recipient email address")

    try:
        result = await handle_dispatch(body, providers)
    except EmailDeliveryError as e:
        logger.error("Crisis alert email failed: crisis_type=%s severity=%s error=%s", body.crisis_type, body.severity, e)
        return JSONResponse(status_code=500, content={"error": str(e)})

    logger.info(
        "Crisis alert dispatched: crisis_type=%s severity=%s sms=%s",
        body.crisis_type,
        body.severity,
        result.sms is not None,
    )
    return result.to_wire()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)
