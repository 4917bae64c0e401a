# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from tabmap.logging.init import reset_logging


@pytest.fixture(autouse=True)
def _fresh_logging():
    # Each test gets a logger bound to its own captured stdout
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def people_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "people.csv"
    f.write_text(
        "Name,Age,Occupation,Salary\n"
        "Alice,30,Engineer,30000.00\n"
        "Bob,41,,1250.5\n",
        encoding="utf-8",
    )
    return f


@pytest.fixture()
def sample_mapping_yaml() -> str:
    return """sourceLocation: data/people.csv
columnMappings:
  - sourceColumnName: Name
    targetColumnName: FullName
    targetColumnType: string
  - sourceColumnName: Age
    targetColumnName: Years
    targetColumnType: int
  - sourceColumnName: Occupation
    targetColumnName: Job
    targetColumnType: string
    defaultValue: Unknown
  - sourceColumnName: Salary
    targetColumnName: Salary
    targetColumnType: double
options:
  hasHeaderRow: true
"""


@pytest.fixture()
def sample_pipeline_yaml() -> str:
    return """logs_directory: ./logs
jobs:
  - name: people
    reader:
      kind: csv
      mapping: people_in.yml
    writer:
      kind: csv
      mapping:
        sourceLocation: data/people_out.csv
        columnMappings:
          - {sourceColumnName: FullName, targetColumnName: name, targetColumnType: string}
          - {sourceColumnName: Years, targetColumnName: age, targetColumnType: int}
          - {sourceColumnName: Job, targetColumnName: job, targetColumnType: string}
          - {sourceColumnName: Salary, targetColumnName: salary, targetColumnType: double}
        options:
          withHeaderRow: true
"""


@pytest.fixture()
def write_config(
    temp_workdir: Path, people_csv: Path, sample_mapping_yaml: str, sample_pipeline_yaml: str
) -> Path:
    (temp_workdir / "config" / "people_in.yml").write_text(sample_mapping_yaml, encoding="utf-8")
    cfg = temp_workdir / "config" / "pipeline.yml"
    cfg.write_text(sample_pipeline_yaml, encoding="utf-8")
    return cfg
