from __future__ import annotations

import json
from pathlib import Path

import pytest

import main


def test_dump_roster_from_file(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    source = tmp_path / "roster.json"
    source.write_text(
        json.dumps({"_id": "r1", "sport": "Tennis", "players": ["Jane Doe"]}), encoding="utf-8"
    )

    assert main.main(["dump", "roster", "--file", str(source)]) == 0
    assert "Jane Doe" in capsys.readouterr().out


def test_dump_missing_file_fails(tmp_path: Path) -> None:
    assert main.main(["dump", "general", "--file", str(tmp_path / "missing.json")]) == 1


def test_dump_invalid_json_fails(tmp_path: Path) -> None:
    source = tmp_path / "broken.json"
    source.write_text("{not json", encoding="utf-8")
    assert main.main(["dump", "results", "--file", str(source)]) == 1


def test_unknown_domain_is_rejected() -> None:
    with pytest.raises(SystemExit):
        main.build_parser().parse_args(["dump", "weather"])
