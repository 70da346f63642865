#!/usr/bin/python
# coding: utf-8

import os
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional


def _now() -> datetime:
    return datetime.now(timezone.utc)


def derive_project_name(project_path: str) -> str:
    """
    Final segment of the path using the host separator rules.

    Trailing separators are ignored and a root or empty path gives "".
    Separators foreign to the host are ordinary filename characters.
    """
    separators = os.sep + (os.altsep or "")
    stripped = project_path.rstrip(separators)
    return os.path.basename(stripped)


def build_template_context(
    project_path: str, additional_args: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    """
    Base rendering context for a project.

    Args:
        project_path (str): Project root, exposed verbatim as PROJECT_PATH.
        additional_args (Mapping, optional): Merged over the base fields. Any
            key wins, including the reserved PROJECT_* and date/time keys.

    Returns:
        dict: PROJECT_PATH, PROJECT_NAME, TIMESTAMP, CURRENT_DATE, CURRENT_TIME
        plus the additional arguments.
    """
    now = _now()
    local_now = now.astimezone()
    context = {
        "PROJECT_PATH": project_path,
        "PROJECT_NAME": derive_project_name(project_path),
        "TIMESTAMP": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "CURRENT_DATE": local_now.strftime("%x"),
        "CURRENT_TIME": local_now.strftime("%X"),
    }
    if additional_args:
        context.update(additional_args)
    return context
