import asyncio
import json

from conftest import ZONE
from naptr_regexp.cli.main import EXIT_ERROR, EXIT_INVALID, EXIT_OK, main


def run(*argv):
    return asyncio.run(main(list(argv)))


def test_check_valid(capsys):
    assert run("check", r"!test(something)!\\1!i") == EXIT_OK

    out = capsys.readouterr().out
    assert "VALID" in out
    assert "test(something)" in out


def test_check_invalid(capsys):
    assert run("check", "!a!b!", r"!test(something)!\\2!i") == EXIT_INVALID

    out = capsys.readouterr().out
    assert "More backrefs in replacement than captures in match" in out


def test_check_empty_regexp_is_reported(capsys):
    assert run("check", "") == EXIT_INVALID

    out = capsys.readouterr().out
    assert "MALFORMED" in out
    assert "No delimiter" in out


def test_check_undecodable_argument(capsys):
    assert run("check", "!a\udcff!b!") == EXIT_OK

    assert "\\xff" in capsys.readouterr().out


def test_check_json(capsys):
    assert run("--json", "check", "!a!b!", "!a!b!x") == EXIT_INVALID

    results = json.loads(capsys.readouterr().out)
    assert [item["status"] for item in results] == ["VALID", "INVALID"]
    assert results[1]["error"] == "Bad flag: x"
    assert results[0]["find"] == "a"


def test_zone(tmp_path, capsys):
    path = tmp_path / "example.com.zone"
    path.write_text(ZONE)

    assert run("zone", str(path)) == EXIT_INVALID

    out = capsys.readouterr().out
    assert "bad.example.com." in out
    assert "некорректных: 1" in out


def test_zone_missing_file(tmp_path):
    assert run("zone", str(tmp_path / "missing.zone")) == EXIT_ERROR


def test_zone_syntax_error(tmp_path):
    path = tmp_path / "broken.zone"
    path.write_text("$ORIGIN example.com.\n@ IN SOA broken\n")

    assert run("zone", str(path)) == EXIT_ERROR


def test_lookup_rejects_bad_domain():
    assert run("lookup", "not a domain") == EXIT_ERROR


def test_missing_config(tmp_path, capsys):
    assert run("--config", str(tmp_path / "nope.yml"), "check", "!a!b!") == EXIT_ERROR
    assert "nope.yml" in capsys.readouterr().err


def test_zone_json(tmp_path, capsys):
    path = tmp_path / "example.com.zone"
    path.write_text(ZONE)

    assert run("--json", "zone", str(path)) == EXIT_INVALID

    data = json.loads(capsys.readouterr().out)
    assert data["domain"] == "example.com."
    invalid = [record for record in data["records"] if record["status"] == "INVALID"]
    assert [record["owner"] for record in invalid] == ["bad.example.com."]
