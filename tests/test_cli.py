from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from duplicate_detection import cli
from duplicate_detection.cli import app

from conftest import FailingStore

runner = CliRunner()


@pytest.fixture
def export(tmp_path: Path) -> Path:
    path = tmp_path / "customers.csv"
    path.write_text(
        "id,company_name,telephone,afm,deleted\n"
        "1,ΑΕΡΟΠΟΡΙΑ ΑΙΓΑΙΟΥ,2101234567,094456789,0\n"
        "2,ΑΕΡΟΔΡΟΜΙΟ ΑΘΗΝΩΝ,6983-50.50.43,999999999,0\n"
        "3,ΤΑΜΑΓΙΑΝΝΗ ΕΠΕ,6983505043,123456789,0\n",
        encoding="utf-8",
    )
    return path


def _invoke(tmp_path: Path, *args: str):
    return runner.invoke(app, ["--config", str(tmp_path / "none.conf"), *args])


# ── search ─────────────────────────────────────────────────────────────────────

def test_search_by_name(tmp_path, export):
    result = _invoke(tmp_path, "search", "--company", "αερο", "--source", str(export))
    assert result.exit_code == 0, result.output
    assert "ΑΕΡΟΔΡΟΜΙΟ" in result.output
    assert "ΑΕΡΟΠΟΡΙΑ" in result.output
    assert "ΤΑΜΑΓΙΑΝΝΗ" not in result.output


def test_search_nothing_found(tmp_path, export):
    result = _invoke(tmp_path, "search", "--afm", "000000000", "--source", str(export))
    assert result.exit_code == 0, result.output
    assert "No likely duplicates found." in result.output


def test_search_needs_criteria(tmp_path, export):
    result = _invoke(tmp_path, "search", "--source", str(export))
    assert result.exit_code == 2


def test_search_needs_a_datastore(tmp_path):
    result = _invoke(tmp_path, "search", "--company", "ACME")
    assert result.exit_code == 2


def test_search_unreadable_source(tmp_path):
    result = _invoke(tmp_path, "search", "--company", "ACME", "--source", str(tmp_path / "x.txt"))
    assert result.exit_code == 2


def test_search_lookup_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(cli, "_open_store", lambda *args: FailingStore())
    result = _invoke(tmp_path, "search", "--company", "ACME")
    assert result.exit_code == 1
    assert "Duplicate lookup failed" in result.output


def test_search_unopenable_database(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'customers.db'}"
    result = _invoke(tmp_path, "search", "--company", "ACME", "--database", url)
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Duplicate lookup failed" in result.output


def test_greek_search_through_database(tmp_path, export):
    url = f"sqlite:///{tmp_path / 'customers.db'}"
    _invoke(tmp_path, "load", "--source", str(export), "--database", url)
    result = _invoke(tmp_path, "search", "--company", "αερο", "--database", url)
    assert result.exit_code == 0, result.output
    assert "ΑΕΡΟΔΡΟΜΙΟ" in result.output
    assert "ΑΕΡΟΠΟΡΙΑ" in result.output


# ── phone ──────────────────────────────────────────────────────────────────────

def test_phone_lookup(tmp_path, export):
    result = _invoke(tmp_path, "phone", "6983505043", "--source", str(export))
    assert result.exit_code == 0, result.output
    assert "PHONE MATCHES" in result.output
    assert "ΤΑΜΑΓΙΑΝΝΗ" in result.output


# ── compare ────────────────────────────────────────────────────────────────────

def test_compare(tmp_path):
    result = _invoke(tmp_path, "compare", "--name", "ACME", "--other-name", "acme")
    assert result.exit_code == 0, result.output
    assert "composite" in result.output
    assert "85" in result.output


# ── load / init-config ─────────────────────────────────────────────────────────

def test_load_then_search_database(tmp_path, export):
    url = f"sqlite:///{tmp_path / 'customers.db'}"
    result = _invoke(tmp_path, "load", "--source", str(export), "--database", url)
    assert result.exit_code == 0, result.output
    assert "Loaded 3 customer(s)" in result.output

    result = _invoke(tmp_path, "search", "--afm", "123456789", "--database", url)
    assert result.exit_code == 0, result.output
    assert "ΤΑΜΑΓΙΑΝΝΗ" in result.output


def test_database_url_from_config(tmp_path, export):
    url = f"sqlite:///{tmp_path / 'customers.db'}"
    _invoke(tmp_path, "load", "--source", str(export), "--database", url)
    conf = tmp_path / "dupe-check.conf"
    conf.write_text(f'database_url = "{url}"\n', encoding="utf-8")

    result = runner.invoke(app, ["--config", str(conf), "search", "--afm", "094456789"])
    assert result.exit_code == 0, result.output
    assert "ΑΕΡΟΠΟΡΙΑ" in result.output


def test_init_config(tmp_path):
    target = tmp_path / "local" / "dupe-check.conf"
    result = _invoke(tmp_path, "init-config", "--path", str(target))
    assert result.exit_code == 0, result.output
    assert target.exists()
