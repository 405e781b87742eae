"""Configuration for the crisis alert client and dispatch service."""
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend root if present
_env_path = Path(__file__).resolve().parent.parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)


def _int_env(key: str, default: int, allow_zero: bool = False) -> int:
    val = os.environ.get(key)
    if val is None or val == "":
        return default
    try:
        v = int(val)
        return max(0, v) if allow_zero else max(1, v)
    except ValueError:
        return default


# Supabase Edge Functions - the dashboard reaches send-crisis-alert through here
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY", "")
DISPATCH_FUNCTION_NAME = os.environ.get("DISPATCH_FUNCTION_NAME", "send-crisis-alert")

# "supabase" (Edge Function) or "http" (self-hosted api/main.py)
DISPATCH_BACKEND = os.environ.get("DISPATCH_BACKEND", "supabase").strip().lower()
DISPATCH_API_URL = os.environ.get("DISPATCH_API_URL", "http://localhost:8000")
DISPATCH_REQUEST_TIMEOUT = _int_env("DISPATCH_REQUEST_TIMEOUT", 30)  # seconds, HTTP boundary only
ALERTS_API_KEY = os.environ.get("ALERTS_API_KEY", "")
# Comma-separated browser origins allowed to call the API; "*" allows any
CORS_ALLOW_ORIGINS = [o.strip() for o in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

# Resend (email channel)
RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
RESEND_API_URL = os.environ.get("RESEND_API_URL", "https://api.resend.com/emails")
ALERT_EMAIL_FROM = os.environ.get("ALERT_EMAIL_FROM", "Crisis Alerts <notifications@resend.dev>")

# Fixed additional email recipients per category (demo mailboxes)
AUTHORITIES_EMAIL = os.environ.get("AUTHORITIES_EMAIL", "authorities@crisisscope-demo.com")
NGOS_EMAIL = os.environ.get("NGOS_EMAIL", "relief-ngos@crisisscope-demo.com")
MEDIA_EMAIL = os.environ.get("MEDIA_EMAIL", "media-outlets@crisisscope-demo.com")

# Twilio (SMS channel)
TWILIO_ACCOUNT_SID = os.environ.get("TWILIO_ACCOUNT_SID", "")
TWILIO_AUTH_TOKEN = os.environ.get("TWILIO_AUTH_TOKEN", "")
TWILIO_PHONE_NUMBER = os.environ.get("TWILIO_PHONE_NUMBER", "")

# Fixed additional SMS recipients per category; empty = category has no SMS contact
AUTHORITIES_PHONE = os.environ.get("AUTHORITIES_PHONE", "")
NGOS_PHONE = os.environ.get("NGOS_PHONE", "")
MEDIA_PHONE = os.environ.get("MEDIA_PHONE", "")
