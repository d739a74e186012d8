"""
ZAP alerts and the ignore-list classifier.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List


# ZAP JSON key -> Alert attribute, where they differ
_API_FIELD_MAP = {
    "pluginId": "plugin_id",
    "messageId": "message_id",
}


@dataclass(frozen=True)
class Alert:
    """A finding reported by ZAP; `alert` is the category name used for ignore matching"""
    alert: str
    risk: str = ""
    confidence: str = ""
    url: str = ""
    param: str = ""
    attack: str = ""
    evidence: str = ""
    other: str = ""
    description: str = ""
    solution: str = ""
    reference: str = ""
    cweid: str = ""
    wascid: str = ""
    plugin_id: str = ""
    message_id: str = ""
    id: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Alert":
        """Build from one entry of `core/view/alerts`"""
        values: Dict[str, str] = {}
        for key, value in (data or {}).items():
            name = _API_FIELD_MAP.get(key, key)
            if name in cls.__dataclass_fields__ and value is not None:
                values[name] = str(value)
        # Older ZAP versions only send `name`
        if not values.get("alert"):
            values["alert"] = str((data or {}).get("name") or "")
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def non_empty_fields(self) -> Dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v}


@dataclass(frozen=True)
class AlertPartition:
    ignored: List[Alert]
    required: List[Alert]

    def counts(self) -> Dict[str, int]:
        return {
            "total": len(self.ignored) + len(self.required),
            "required": len(self.required),
            "ignored": len(self.ignored),
        }


def is_ignored(alert: Alert, ignored_names: Iterable[str]) -> bool:
    """Exact, case-insensitive match of the alert name against the ignore list"""
    name = alert.alert.casefold()
    return any(name == ignored.strip().casefold() for ignored in ignored_names if ignored and ignored.strip())


def classify_alerts(alerts: Iterable[Alert], ignored_names: Iterable[str]) -> AlertPartition:
    """Split alerts into ignored and required, keeping input order in both"""
    names = list(ignored_names or ())
    ignored: List[Alert] = []
    required: List[Alert] = []
    for alert in alerts:
        if is_ignored(alert, names):
            ignored.append(alert)
        else:
            required.append(alert)
    return AlertPartition(ignored=ignored, required=required)
