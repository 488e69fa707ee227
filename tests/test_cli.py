"""End-to-end tests for the har-stitch command line."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from har_stitch.cli import main
from tests.harness.builders import make_entry, make_har, make_page

T0 = datetime(2026, 2, 3, 14, 0, 0, tzinfo=timezone.utc)


def _at(ms):
    return (T0 + timedelta(milliseconds=ms)).isoformat()


def _write(path, har):
    path.write_text(json.dumps(har), encoding="utf-8")
    return str(path)


@pytest.fixture
def captures(tmp_path):
    """Two captures of the same URL, both using page id page_1."""
    first = make_har(
        pages=[make_page(started=_at(0), url="https://example.com/")],
        entries=[make_entry(started=_at(0), time=420)],
    )
    second = make_har(
        pages=[make_page(started=_at(10_000), url="https://example.com/")],
        entries=[make_entry(started=_at(10_050), time=250)],
    )
    return [_write(tmp_path / "run-1.har", first), _write(tmp_path / "run-2.har", second)]


def test_merge_command(tmp_path, captures, capsys):
    out = tmp_path / "merged.har"

    assert main(["merge", *captures, "-o", str(out)]) == 0

    merged = json.loads(out.read_text(encoding="utf-8"))
    assert [p["id"] for p in merged["log"]["pages"]] == ["page_1", "page_1-1"]
    assert [e["pageref"] for e in merged["log"]["entries"]] == ["page_1", "page_1-1"]
    assert "2 page(s)" in capsys.readouterr().out


def test_merge_command_rejects_dangling_pageref(tmp_path, captures, capsys):
    bad = _write(tmp_path / "bad.har", make_har(entries=[make_entry(pageref="page_7")]))
    out = tmp_path / "merged.har"

    assert main(["merge", *captures, bad, "-o", str(out)]) == 1

    assert "page_7" in capsys.readouterr().err
    assert not out.exists()


def test_merge_command_no_validate(tmp_path, captures):
    bad = _write(tmp_path / "bad.har", make_har(entries=[make_entry(pageref="page_7")]))
    out = tmp_path / "merged.har"

    assert main(["merge", *captures, bad, "-o", str(out), "--no-validate"]) == 0
    assert len(json.loads(out.read_text(encoding="utf-8"))["log"]["entries"]) == 3


def test_merge_command_missing_input(tmp_path, capsys):
    assert main(["merge", str(tmp_path / "nope.har"), "-o", str(tmp_path / "o.har")]) == 1
    assert "nope.har" in capsys.readouterr().err


def test_fully_loaded_json(tmp_path, captures, capsys):
    out = tmp_path / "merged.har"
    main(["merge", *captures, "-o", str(out)])
    capsys.readouterr()

    assert main(["fully-loaded", str(out), "--json"]) == 0

    assert json.loads(capsys.readouterr().out) == [
        {"url": "https://example.com/", "fullyLoaded": 420.0},
        {"url": "https://example.com/", "fullyLoaded": 300.0},
    ]


def test_fully_loaded_table(captures, capsys):
    assert main(["fully-loaded", captures[0]]) == 0

    output = capsys.readouterr().out
    assert "Fully loaded" in output
    assert "420" in output


def test_fully_loaded_bad_timestamp(tmp_path, capsys):
    path = _write(tmp_path / "bad.har", make_har(entries=[make_entry(started="soon")]))

    assert main(["fully-loaded", path]) == 1
    assert "malformed timestamp" in capsys.readouterr().err


def test_empty_command(tmp_path, write_settings):
    write_settings({"enrichment": {"screenshot": True, "connectivity_profile": "cable"}})
    out = tmp_path / "failed.har"

    assert (
        main(
            [
                "empty",
                "https://example.com/checkout",
                "--browser",
                "chrome",
                "-o",
                str(out),
                "--result-url",
                "https://results.example.org",
            ]
        )
        == 0
    )

    har = json.loads(out.read_text(encoding="utf-8"))
    [page] = har["log"]["pages"]
    assert page["id"] == "failing_page"
    assert har["log"]["browser"]["name"] == "chrome"
    assert page["_meta"] == {
        "connectivity": "cable",
        "screenshot": "https://results.example.org/pages/example_com/checkout/screenshots/1.png",
    }


def test_empty_command_connectivity_flag_overrides_settings(tmp_path, write_settings):
    write_settings({"enrichment": {"connectivity_profile": "cable"}})
    out = tmp_path / "failed.har"

    main(["empty", "https://example.com/", "--browser", "firefox", "-o", str(out), "--connectivity", "3g"])

    har = json.loads(out.read_text(encoding="utf-8"))
    assert har["log"]["pages"][0]["_meta"] == {"connectivity": "3g"}


def test_requires_subcommand():
    with pytest.raises(SystemExit):
        main([])


def _page_without_id(tmp_path):
    page = make_page()
    del page["id"]
    return _write(tmp_path / "no-id.har", make_har(pages=[page], entries=[]))


def test_merge_command_page_without_id(tmp_path, captures, capsys):
    out = tmp_path / "merged.har"

    assert main(["merge", captures[0], _page_without_id(tmp_path), "-o", str(out)]) == 1

    err = capsys.readouterr().err
    assert "no-id.har" in err
    assert "page 0 id must be a string" in err
    assert not out.exists()


def test_fully_loaded_page_without_id(tmp_path, capsys):
    assert main(["fully-loaded", _page_without_id(tmp_path)]) == 1
    assert "page 0 id must be a string" in capsys.readouterr().err


def test_empty_command_ignores_mistyped_setting(tmp_path, write_settings, capsys):
    write_settings({"enrichment": {"result_url": 5, "screenshot": True}})
    out = tmp_path / "failed.har"

    assert main(["empty", "https://example.com/", "--browser", "chrome", "-o", str(out)]) == 0

    har = json.loads(out.read_text(encoding="utf-8"))
    assert har["log"]["pages"][0]["_meta"] == {"connectivity": "native"}
    assert "ignoring enrichment setting result_url" in capsys.readouterr().err


def test_verbose_merge_writes_log_file(tmp_path, captures):
    log_file = tmp_path / "logs" / "merge.log"
    out = tmp_path / "merged.har"

    assert main(["-vv", "--log-file", str(log_file), "merge", *captures, "-o", str(out)]) == 0

    text = log_file.read_text(encoding="utf-8")
    assert "renamed page page_1 -> page_1-1" in text
    assert "merged 2 HARs" in text


def test_quiet_by_default(tmp_path, captures, capsys):
    assert main(["merge", *captures, "-o", str(tmp_path / "merged.har")]) == 0
    assert capsys.readouterr().err == ""
