"""Tests for the ``python -m umbrella_journal`` entry point."""

from __future__ import annotations

import json

import pytest

from umbrella_journal.__main__ import main


class TestMain:
    def test_usage_without_arguments(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 1
        assert "Usage" in capsys.readouterr().err

    def test_prints_json_per_file(self, tmp_path, capsys, forwarded_journal_bytes: bytes):
        path = tmp_path / "journal.eml"
        path.write_bytes(forwarded_journal_bytes)

        main([str(path)])

        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 1
        result = json.loads(lines[0])
        assert result["metadata"]["sender"] == "alice@example.com"
        assert result["metadata"]["bcc"] == ["dave@example.com"]
        assert len(result["parts"]) == 3
        assert len(result["message_hash"]) == 64

    def test_failure_sets_exit_code(self, tmp_path, capsys, journal_eml_bytes: bytes):
        good = tmp_path / "good.eml"
        good.write_bytes(journal_eml_bytes)
        bad = tmp_path / "bad.eml"
        bad.write_bytes(b"not an email\n")

        with pytest.raises(SystemExit) as exc_info:
            main([str(good), str(bad), str(tmp_path / "missing.eml")])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out.strip().splitlines()
        assert len(out) == 1
