"""Last-run status flag - the only state the dashboard keeps between runs."""
import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional


def read_last_run_status(path: str) -> Optional[str]:
    """
    Read the failure description left by the previous run.

    Args:
        path: Status file location

    Returns:
        The previous run's error description, or None if it succeeded
        (or there is no readable status file)
    """
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            status = json.load(f)
    except (OSError, ValueError) as e:
        logging.warning(f"Could not read last run status from {path}: {e}")
        return None
    if not isinstance(status, dict):
        logging.warning(f"Could not read last run status from {path}: unexpected content {status!r}")
        return None

    if status.get("success", True):
        return None
    return status.get("error") or "Unknown error"


def write_last_run_status(path: str, error: Optional[str] = None) -> None:
    """Record this run's outcome: success when `error` is None."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    status = {
        "success": error is None,
        "error": error,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(status, f)
    logging.debug(f"Last run status written to {path}: success={error is None}")
