"""Unit tests for the listing and push-walk façades."""

from __future__ import annotations

import os

import pytest

from fstree.listing import (
    list_all,
    list_all_sync,
    list_dirs,
    list_dirs_sync,
    list_files,
    list_files_sync,
)
from fstree.walking import (
    walk_all,
    walk_all_sync,
    walk_dirs_sync,
    walk_files,
    walk_files_sync,
)


def by_name(a: str, b: str) -> int:
    return (a > b) - (a < b)


def reverse_by_name(a: str, b: str) -> int:
    return by_name(b, a)


class TestListSync:
    """list_*_sync helpers."""

    def test_list_all_shallow(self, sample_tree):
        assert sorted(list_all_sync(sample_tree)) == ["a.txt", "b", "f"]

    def test_list_files_recursive(self, sample_tree):
        assert sorted(list_files_sync(sample_tree, recursive=True)) == ["a.txt", "b/c.txt", "b/d/e.txt"]

    def test_list_dirs_recursive(self, sample_tree):
        assert sorted(list_dirs_sync(sample_tree, recursive=True)) == ["b", "b/d", "f"]

    def test_kind_filter_composes_with_user_filter(self, sample_tree):
        result = list_files_sync(sample_tree, recursive=True, filter=lambda e: e.name.startswith("c"))
        assert result == ["b/c.txt"]

    def test_sort_with_comparator(self, sample_tree):
        result = list_all_sync(sample_tree, recursive=True, sort=by_name)
        assert result == ["a.txt", "b", "b/c.txt", "b/d", "b/d/e.txt", "f"]

    def test_sort_applies_to_mapped_values(self, sample_tree):
        result = list_files_sync(sample_tree, recursive=True, map=lambda e: e.name, sort=reverse_by_name)
        assert result == ["e.txt", "c.txt", "a.txt"]

    def test_prepend_dir(self, sample_tree):
        result = list_dirs_sync(sample_tree, prepend_dir=True, sort=by_name)
        assert result == [os.path.join(str(sample_tree), "b"), os.path.join(str(sample_tree), "f")]

    def test_empty_directory_yields_empty_list(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert list_all_sync(tmp_path / "empty", recursive=True) == []

    def test_filtered_to_nothing_yields_empty_list(self, sample_tree):
        assert list_files_sync(sample_tree, recursive=True, filter=lambda e: False) == []

    def test_threads_do_not_change_the_result_set(self, sample_tree):
        single = sorted(list_all_sync(sample_tree, recursive=True, threads=1))
        pooled = sorted(list_all_sync(sample_tree, recursive=True, threads=4))
        assert single == pooled


class TestListAsync:
    """Coroutine list_* helpers."""

    @pytest.mark.asyncio
    async def test_list_all_recursive(self, sample_tree):
        result = await list_all(sample_tree, recursive=True, sort=by_name)
        assert result == ["a.txt", "b", "b/c.txt", "b/d", "b/d/e.txt", "f"]

    @pytest.mark.asyncio
    async def test_list_files_and_dirs(self, sample_tree):
        files = await list_files(sample_tree, recursive=True, threads=2)
        dirs = await list_dirs(sample_tree, recursive=True, threads=2)
        assert sorted(files) == ["a.txt", "b/c.txt", "b/d/e.txt"]
        assert sorted(dirs) == ["b", "b/d", "f"]


class TestWalkFacade:
    """walk_all / walk_files / walk_dirs."""

    def test_walk_files_sync(self, sample_tree):
        received = []
        walk_files_sync(sample_tree, lambda item, token: received.append(item), recursive=True)
        assert sorted(received) == ["a.txt", "b/c.txt", "b/d/e.txt"]

    def test_walk_dirs_sync(self, sample_tree):
        received = []
        walk_dirs_sync(sample_tree, lambda item, token: received.append(item), recursive=True)
        assert sorted(received) == ["b", "b/d", "f"]

    def test_sorted_walk_dispatches_in_sort_order(self, sample_tree):
        received = []
        walk_all_sync(sample_tree, lambda item, token: received.append(item), recursive=True, sort=by_name)
        assert received == ["a.txt", "b", "b/c.txt", "b/d", "b/d/e.txt", "f"]

    def test_sorted_walk_honours_abort(self, sample_tree):
        received = []

        def callback(item, token):
            received.append(item)
            if len(received) == 2:
                token.abort()

        walk_all_sync(sample_tree, callback, recursive=True, sort=by_name)
        assert received == ["a.txt", "b"]

    @pytest.mark.asyncio
    async def test_walk_files_async_callback(self, sample_tree):
        received = []

        async def callback(item, token):
            received.append(item)

        await walk_files(sample_tree, callback, recursive=True, threads=2)
        assert sorted(received) == ["a.txt", "b/c.txt", "b/d/e.txt"]

    @pytest.mark.asyncio
    async def test_walk_all_sorted_abort(self, sample_tree):
        received = []

        async def callback(item, token):
            received.append(item)
            token.abort()

        await walk_all(sample_tree, callback, recursive=True, sort=reverse_by_name)
        assert received == ["f"]
