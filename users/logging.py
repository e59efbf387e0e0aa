import logging

logger = logging.getLogger("auth")


def client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit a structured ``auth.<action>`` event with user, ip and status."""
    event = f"auth.{action}"
    payload = {"event": event, "action": action, "ip": client_ip(request), "status": status}
    if user is not None:
        payload["user_id"] = getattr(user, "id", None)
        payload["email"] = getattr(user, "email", None)
    if extra:
        payload.update(extra)
    level = logging.INFO if status == "success" else logging.WARNING
    logger.log(level, event, extra=payload)
