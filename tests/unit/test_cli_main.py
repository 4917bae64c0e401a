from __future__ import annotations

import os
from pathlib import Path

from tabmap.cli import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from tabmap.cli import main as cli_main


def test_cli_success(write_config: Path, temp_workdir: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "SUMMARY jobs=1/1 success=1 failed=0 rows_read=2 rows_written=2 rejected=0" in out
    written = (temp_workdir / "data" / "people_out.csv").read_text(encoding="utf-8")
    assert written == "name,age,job,salary\nAlice,30,Engineer,30000.00\nBob,41,Unknown,1250.5\n"


def test_cli_rejected_rows_exit_partial(write_config: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "people.csv").write_text(
        "Name,Age,Occupation,Salary\nAlice,30,Engineer,30000.00\nBob,forty,Cook,1\n", encoding="utf-8"
    )
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert "ERROR people: row 2 rejected" in out
    assert "rejected=1" in out


def test_cli_missing_config(temp_workdir: Path, capsys):
    code = cli_main(["--config", "config/missing.yml"])
    out = capsys.readouterr().out
    assert code == EXIT_FATAL
    assert "ERROR config: config file not found" in out


def test_cli_debug_mode(write_config: Path, capsys):
    code = cli_main(["--debug"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "DEBUG debug mode enabled" in out


def test_cli_inspect_data(write_config: Path, temp_workdir: Path, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "JOB: people reader=csv source=data/people.csv" in out
    assert "types={'Name': 'string', 'Age': 'int', 'Occupation': 'string', 'Salary': 'double'}" in out
    assert "row={'Name': 'Alice', 'Age': '30', 'Occupation': 'Engineer', 'Salary': '30000.00'}" in out
    assert "SUMMARY" not in out
    assert not (temp_workdir / "data" / "people_out.csv").exists()


def test_cli_inspect_data_reports_read_errors(write_config: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "people.csv").unlink()
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "read_error: CSV file not found" in out


def test_cli_loads_env_file(write_config: Path, temp_workdir: Path, monkeypatch):
    monkeypatch.setenv("TABMAP_TEST_VAR", "from-process")
    (temp_workdir / ".env").write_text("TABMAP_TEST_VAR=from-dotenv\n", encoding="utf-8")
    cli_main([])
    assert os.environ["TABMAP_TEST_VAR"] == "from-dotenv"
