"""Unit tests for JSON helpers (fstree.jsonio)."""

from __future__ import annotations

import json
import os
import stat

import pytest

from fstree.config import get_settings
from fstree.errors import NotFoundError
from fstree.jsonio import read_json, read_json_sync, write_json, write_json_sync


class TestWriteJson:
    def test_compact_by_default(self, tmp_path):
        write_json_sync(tmp_path / "out" / "data.json", {"a": [1, 2], "b": None})
        assert (tmp_path / "out" / "data.json").read_text() == '{"a":[1,2],"b":null}'

    def test_integer_indent(self, tmp_path):
        write_json_sync(tmp_path / "data.json", {"a": 1}, indent=2)
        assert (tmp_path / "data.json").read_text() == '{\n  "a": 1\n}'

    def test_string_indent(self, tmp_path):
        write_json_sync(tmp_path / "data.json", [1], indent="\t")
        assert (tmp_path / "data.json").read_text() == "[\n\t1\n]"

    def test_non_ascii_written_as_utf8(self, tmp_path):
        write_json_sync(tmp_path / "data.json", {"name": "Zoë"})
        assert (tmp_path / "data.json").read_bytes() == '{"name":"Zoë"}'.encode()

    def test_indent_from_settings(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FSTREE_JSON_IO__INDENT", "4")
        get_settings.cache_clear()
        write_json_sync(tmp_path / "data.json", {"a": 1})
        assert (tmp_path / "data.json").read_text() == '{\n    "a": 1\n}'

    def test_file_gets_default_mode(self, tmp_path):
        write_json_sync(tmp_path / "data.json", {})
        assert stat.S_IMODE(os.stat(tmp_path / "data.json").st_mode) == 0o666

    @pytest.mark.asyncio
    async def test_async_form(self, tmp_path):
        await write_json(tmp_path / "data.json", {"k": "v"}, indent=1)
        assert json.loads((tmp_path / "data.json").read_text()) == {"k": "v"}


class TestReadJson:
    @pytest.mark.parametrize("value", [{"a": {"b": [1, 2.5, True]}}, [1, "two"], "text", 3, None])
    def test_reads_any_json_value(self, tmp_path, value):
        (tmp_path / "v.json").write_text(json.dumps(value))
        assert read_json_sync(tmp_path / "v.json") == value

    def test_missing_file_raises_not_found(self, tmp_path):
        with pytest.raises(NotFoundError):
            read_json_sync(tmp_path / "missing.json")

    def test_malformed_content_raises_value_error(self, tmp_path):
        (tmp_path / "bad.json").write_text("{not json")
        with pytest.raises(ValueError):
            read_json_sync(tmp_path / "bad.json")

    @pytest.mark.asyncio
    async def test_async_form(self, tmp_path):
        await write_json(tmp_path / "v.json", {"x": [1, 2]})
        assert await read_json(tmp_path / "v.json") == {"x": [1, 2]}
