import json

from jelly.report import BuildReport


def test_blank_messages_are_not_recorded():
    report = BuildReport()
    report.record_error("")
    report.record_error("   \n")
    assert report.errors == []
    assert not report.has_errors

    report.record_error("  Could not open locale file: fr.json  ")
    assert report.errors == ["Could not open locale file: fr.json"]
    assert report.has_errors


def test_warn_echoes_to_stderr(capsys):
    report = BuildReport()
    report.warn("Invalid file size for locale: de.json")

    assert report.errors == ["Invalid file size for locale: de.json"]
    assert "Warning: Invalid file size for locale: de.json" in capsys.readouterr().err


def test_health_file_lists_each_error_once_and_caps_the_list(tmp_path):
    report = BuildReport(name="site")
    report.record_error("dup")
    report.record_error("dup")
    for index in range(30):
        report.record_error(f"error {index}")
    report.add_pages_found(3)
    report.add_page_written()

    path = report.write(tmp_path / "health")

    assert path == tmp_path / "health" / "site.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["errors"][:2] == ["dup", "error 0"]
    assert len(payload["errors"]) == 20
    assert payload["pages_found"] == 3
    assert payload["pages_written"] == 1
    assert payload["finished_at"].endswith("Z")
    # The in-memory list is untouched by the summary.
    assert len(report.errors) == 32
