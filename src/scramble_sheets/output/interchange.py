"""
Module: output.interchange

Purpose:
    Machine-readable exports of a batch: the interchange JSON, its
    script-wrapped JSONP twin, and the static viewer page that loads it.

Key Functions:
    - build_interchange(): Batch -> JSON-ready dict
    - to_json() / to_jsonp(): Serialization
    - viewer_html(): Viewer page pointing at the JSONP file
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from scramble_sheets import generator_name
from scramble_sheets.core.models.request import ScrambleRequest

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
VIEWER_TEMPLATE = "scrambleviewer.html"
JSONP_PLACEHOLDER = "%SCRAMBLES_JSONP_FILENAME%"
JSONP_VARIABLE = "SCRAMBLES_JSON"


def build_interchange(
    requests: Sequence[ScrambleRequest],
    global_title: Optional[str],
    generation_date: datetime,
    generation_url: Optional[str] = None,
    schedule: Optional[Any] = None,
) -> Dict[str, Any]:
    """
    Interchange document for downstream tooling.

    Keys: sheets, competitionName, version, generationDate, generationUrl
    and, when given, schedule (copied verbatim). Unset values are omitted.
    """
    data: Dict[str, Any] = {
        "sheets": [request.to_dict() for request in requests],
        "version": generator_name(),
        "generationDate": generation_date.isoformat(),
    }
    if global_title is not None:
        data["competitionName"] = global_title
    if generation_url is not None:
        data["generationUrl"] = generation_url
    if schedule is not None:
        data["schedule"] = schedule
    return data


def to_json(data: Dict[str, Any]) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def to_jsonp(json_text: str) -> str:
    return f"var {JSONP_VARIABLE} = {json_text};"


def viewer_html(jsonp_filename: str, template_path: Optional[Path] = None) -> str:
    """
    Viewer page with the JSONP file name filled in.

    Raises:
        OSError: If the template cannot be read
    """
    path = template_path or TEMPLATES_DIR / VIEWER_TEMPLATE
    lines = path.read_text(encoding="utf-8").splitlines()
    return "".join(line.replace(JSONP_PLACEHOLDER, jsonp_filename) + "\n" for line in lines)
