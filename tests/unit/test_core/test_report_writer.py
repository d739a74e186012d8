"""
Unit tests for the alerts report file
"""
import json
import xml.etree.ElementTree as ET

import pytest

from core.alerts import Alert
from core.report import write_alerts_report


@pytest.mark.unit
class TestReportWriter:
    """Report layout and failure handling"""

    def test_xml_report_lists_all_three_sections(self, tmp_path, sample_alerts):
        required = sample_alerts[:2]
        ignored = sample_alerts[2:]

        path = write_alerts_report(required, sample_alerts, ignored, tmp_path)

        assert path is not None and path.exists()
        assert path.parent == tmp_path
        assert path.name.startswith("ZAP") and path.suffix == ".xml"

        root = ET.parse(path).getroot()
        assert root.tag == "alerts"
        found = root.find("alertsFound")
        not_found = root.find("alertsNotFound")
        ignored_found = root.find("ignoredAlertsFound")
        assert found.get("alertsFound") == "3"
        assert not_found.get("alertsNotFound") == "2"
        assert ignored_found.get("ignoredAlertsFound") == "1"
        assert [a.get("alert") for a in not_found.findall("alert")] == [
            "Cross Site Scripting (Reflected)",
            "SQL Injection",
        ]
        assert ignored_found.find("alert").get("risk") == "Low"

    def test_sections_present_when_required_is_empty(self, tmp_path):
        alert = Alert(alert="XSS")
        path = write_alerts_report([], [alert], [alert], tmp_path)

        root = ET.parse(path).getroot()
        assert root.find("alertsNotFound").get("alertsNotFound") == "0"
        assert root.find("alertsNotFound").findall("alert") == []
        assert root.find("ignoredAlertsFound").get("ignoredAlertsFound") == "1"

    def test_empty_run_still_writes_file(self, tmp_path):
        path = write_alerts_report([], [], [], tmp_path)
        root = ET.parse(path).getroot()
        assert [child.tag for child in root] == ["alertsFound", "alertsNotFound", "ignoredAlertsFound"]

    def test_each_run_gets_a_unique_file(self, tmp_path):
        first = write_alerts_report([], [], [], tmp_path)
        second = write_alerts_report([], [], [], tmp_path)
        assert first != second
        assert len(list(tmp_path.glob("ZAP*.xml"))) == 2

    def test_creates_missing_directory(self, tmp_path):
        target = tmp_path / "target" / "zap-reports"
        path = write_alerts_report([], [], [], target)
        assert path.parent == target

    def test_json_report(self, tmp_path, sample_alerts):
        path = write_alerts_report(sample_alerts[:1], sample_alerts, sample_alerts[1:], tmp_path, fmt="json")

        assert path.suffix == ".json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["counts"] == {"alertsFound": 3, "alertsNotFound": 1, "ignoredAlertsFound": 2}
        assert data["alertsNotFound"][0]["alert"] == "Cross Site Scripting (Reflected)"
        assert len(data["ignoredAlertsFound"]) == 2

    def test_io_failure_is_logged_not_raised(self, tmp_path, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")

        path = write_alerts_report([], [], [], blocker / "reports")

        assert path is None
        assert "Error creating alerts report file" in caplog.text

    def test_control_bytes_in_evidence_keep_xml_well_formed(self, tmp_path):
        alert = Alert(
            alert="Information Disclosure",
            risk="Low",
            evidence="binary\x00\x1bdata",
            attack="a\x07b\tc",
        )

        path = write_alerts_report([alert], [alert], [], tmp_path)

        root = ET.parse(path).getroot()
        written = root.find("alertsFound/alert")
        assert written.get("evidence") == "binarydata"
        assert written.get("attack") == "ab\tc"
        assert written.get("alert") == "Information Disclosure"
