"""Tests for the command line tool."""

import json

import pytest

from plagiarism.cli import main

from conftest import ESSAY_ONE, ESSAY_ONE_COPY, ESSAY_OTHER


@pytest.fixture
def essays(tmp_path):
    paths = {}
    for name, text in (("one", ESSAY_ONE), ("copy", ESSAY_ONE_COPY), ("other", ESSAY_OTHER)):
        path = tmp_path / f"{name}.txt"
        path.write_text(text, encoding="utf-8")
        paths[name] = str(path)
    return paths


def test_compare_copies(essays, capsys):
    main(["compare", essays["one"], essays["copy"]])

    result = json.loads(capsys.readouterr().out)
    assert result["similarity"] == 1.0
    assert result["similarity_percent"] == 100.0
    assert result["is_match"] is True
    assert result["file1"] == essays["one"]


def test_compare_different(essays, capsys):
    main(["compare", essays["one"], essays["other"], "--ngram", "2", "--threshold", "0.5"])

    result = json.loads(capsys.readouterr().out)
    assert result["similarity"] == 0.0
    assert result["is_match"] is False


def test_compare_missing_file(essays, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["compare", essays["one"], str(tmp_path / "missing.txt")])

    assert exc_info.value.code == 1
    assert "File not found" in json.loads(capsys.readouterr().out)["error"]


def test_report_rejects_invalid_id(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["report", "x" * 51])

    assert exc_info.value.code == 1
    assert json.loads(capsys.readouterr().out) == {"error": "task id is too long"}


def test_no_command(capsys):
    with pytest.raises(SystemExit):
        main([])
