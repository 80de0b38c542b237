"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/events.py
Delivery of observer notifications (scan progress, resolution progress).
"""
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def notify(observer: Optional[Any], event: str, *args: Any) -> None:
    """
    Call `observer.<event>(*args)` if the observer defines it.
    Observer errors are logged and never reach the caller.
    """
    if observer is None:
        return
    handler = getattr(observer, event, None)
    if handler is None:
        return
    try:
        handler(*args)
    except Exception as e:
        logger.warning(f"Error in {event} event handler: {e}")
