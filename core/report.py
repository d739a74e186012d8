"""
Alerts report file.

One file per run in the report directory, holding all reported alerts, the
required (not ignored) ones and the ignored ones. The XML layout follows the
alerts file written by the ZAP Java client so existing CI parsers keep working.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from core.alerts import Alert
from utils.helpers import ensure_dir
from utils.logger import get_logger


SECTION_ALL = "alertsFound"
SECTION_REQUIRED = "alertsNotFound"
SECTION_IGNORED = "ignoredAlertsFound"

# Characters XML 1.0 does not allow, even escaped
_XML_INVALID_CHARS = re.compile("[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def write_alerts_report(
    required: Sequence[Alert],
    all_alerts: Sequence[Alert],
    ignored: Sequence[Alert],
    directory: str | Path,
    fmt: str = "xml",
) -> Optional[Path]:
    """Write the report; returns its path, or None if writing failed (logged, never raised)"""
    logger = get_logger()
    suffix = ".json" if fmt == "json" else ".xml"

    try:
        if fmt == "json":
            content = render_json(required, all_alerts, ignored).encode("utf-8")
        else:
            content = render_xml(required, all_alerts, ignored)
        out_dir = Path(directory)
        ensure_dir(out_dir)
        fd, name = tempfile.mkstemp(prefix="ZAP", suffix=suffix, dir=str(out_dir))
        path = Path(name)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Error creating alerts report file: {e}")
        return None

    logger.info(f"Alerts report written to {path}")
    return path


def render_xml(required: Sequence[Alert], all_alerts: Sequence[Alert], ignored: Sequence[Alert]) -> bytes:
    root = ET.Element("alerts")
    for section, alerts in (
        (SECTION_ALL, all_alerts),
        (SECTION_REQUIRED, required),
        (SECTION_IGNORED, ignored),
    ):
        element = ET.SubElement(root, section)
        element.set(section, str(len(alerts)))
        for alert in alerts:
            ET.SubElement(element, "alert", _xml_attributes(alert))
    ET.indent(root)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _xml_attributes(alert: Alert) -> dict:
    """Non-empty alert fields with raw control bytes (common in evidence) stripped"""
    return {k: _XML_INVALID_CHARS.sub("", v) for k, v in alert.non_empty_fields().items()}


def render_json(required: Sequence[Alert], all_alerts: Sequence[Alert], ignored: Sequence[Alert]) -> str:
    data = {
        SECTION_ALL: [a.to_dict() for a in all_alerts],
        SECTION_REQUIRED: [a.to_dict() for a in required],
        SECTION_IGNORED: [a.to_dict() for a in ignored],
        "counts": {
            SECTION_ALL: len(all_alerts),
            SECTION_REQUIRED: len(required),
            SECTION_IGNORED: len(ignored),
        },
        "generated": datetime.now().isoformat(),
    }
    return json.dumps(data, ensure_ascii=False, indent=2)
