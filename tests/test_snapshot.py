from __future__ import annotations

import json

import pytest

from app.services.extractor import ArticleRecord
from app.services.snapshot import SnapshotArchive

RECORDS = [
    ArticleRecord("Primeira", "Resumo", "https://g1.globo.com/1.ghtml", "G1"),
    ArticleRecord("Segunda", "No summary available", "https://g1.globo.com/2.ghtml", "G1"),
]


def test_write_creates_directory_and_dated_file(tmp_path):
    archive = SnapshotArchive(tmp_path / "data")
    path = archive.write(RECORDS, day="2024-03-05")

    assert path.name == "articles_2024-03-05.json"
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload[0] == {
        "title": "Primeira",
        "summary": "Resumo",
        "link": "https://g1.globo.com/1.ghtml",
        "source": "G1",
    }


def test_same_day_overwrites(tmp_path):
    archive = SnapshotArchive(tmp_path)
    archive.write(RECORDS, day="2024-03-05")
    archive.write(RECORDS[:1], day="2024-03-05")

    assert archive.list_snapshots() == ["articles_2024-03-05.json"]
    payload = json.loads((tmp_path / "articles_2024-03-05.json").read_text(encoding="utf-8"))
    assert len(payload) == 1


def test_ten_daily_scrapes_leave_seven_newest(tmp_path):
    archive = SnapshotArchive(tmp_path, retention=7)
    for day in range(1, 11):
        archive.write(RECORDS, day=f"2024-01-{day:02d}")

    assert archive.list_snapshots() == [f"articles_2024-01-{day:02d}.json" for day in range(4, 11)]


def test_unrelated_files_are_left_alone(tmp_path):
    (tmp_path / "notes.txt").write_text("keep me")
    archive = SnapshotArchive(tmp_path, retention=1)
    archive.write(RECORDS, day="2024-01-01")
    archive.write(RECORDS, day="2024-01-02")

    assert archive.list_snapshots() == ["articles_2024-01-02.json"]
    assert (tmp_path / "notes.txt").exists()


def test_status_reports_directory(tmp_path):
    archive = SnapshotArchive(tmp_path / "missing")
    assert archive.status()["exists"] is False
    archive.ensure_directory()
    status = archive.status()
    assert status["exists"] is True
    assert status["writable"] is True


def test_retention_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        SnapshotArchive(tmp_path, retention=0)
