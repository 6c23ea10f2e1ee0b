import hashlib
import hmac
import json
import time
from datetime import datetime
from zoneinfo import ZoneInfo

SP = ZoneInfo("America/Sao_Paulo")
WEBHOOK_SECRET = "whsec_test_secret"


def sp(year, month, day, hour, minute=0) -> datetime:
    """Horário de Brasília com offset explícito."""
    return datetime(year, month, day, hour, minute, tzinfo=SP)


def stripe_signature(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    ts = timestamp or int(time.time())
    digest = hmac.new(secret.encode("utf-8"), f"{ts}.{payload}".encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def stripe_event(event_type: str, obj: dict, event_id: str = "evt_test_1") -> dict:
    return {"id": event_id, "object": "event", "type": event_type, "data": {"object": obj}}


def signed_request(event: dict, secret: str = WEBHOOK_SECRET):
    body = json.dumps(event)
    return body, {"stripe-signature": stripe_signature(body, secret), "content-type": "application/json"}


def auth_headers(user_id: str = "user-ana", email: str = "user-ana@example.com") -> dict:
    from app.core.security import create_access_token

    token = create_access_token({"sub": user_id, "email": email, "user_metadata": {"name": "Dra. Ana"}})
    return {"Authorization": f"Bearer {token}"}
