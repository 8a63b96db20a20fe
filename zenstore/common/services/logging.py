import json
import logging
from datetime import datetime, timezone


_event_logger = logging.getLogger("zenstore.events")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def log_event(level: str, event: str, **fields) -> None:
    """Emit one JSON line describing a business event."""
    payload = {
        "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "level": level.lower(),
        "event": event,
    }
    payload.update(fields or {})
    _event_logger.log(
        _LEVELS.get(level.lower(), logging.INFO),
        json.dumps(payload, ensure_ascii=False, default=str),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, (level or "INFO").upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
