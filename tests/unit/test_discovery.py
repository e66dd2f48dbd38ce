"""Unit tests for source file discovery."""

import os

import pytest

from repolens.code.discovery import FileDiscovery


def _write(root, relative_path, content="x = 1\n"):
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


class TestFileDiscovery:
    """Tests for FileDiscovery.discover."""

    def test_selects_supported_files_sorted(self, tmp_path):
        _write(tmp_path, "src/b.py")
        _write(tmp_path, "src/a.ts")
        _write(tmp_path, "README.md")
        _write(tmp_path, "assets/logo.svg")

        files = FileDiscovery().discover(tmp_path)

        assert [f.relative_path for f in files] == ["src/a.ts", "src/b.py"]
        assert files[1].language == "Python"
        assert files[1].extension == ".py"

    @pytest.mark.parametrize(
        "ignored",
        [
            "node_modules/lib/index.js",
            ".git/hooks/run.py",
            "dist/bundle.js",
            "tests/test_app.py",
            "pkg/__pycache__/mod.py",
            "logs/app.json",
        ],
    )
    def test_ignored_directories(self, tmp_path, ignored):
        _write(tmp_path, ignored)
        _write(tmp_path, "app.py")

        files = FileDiscovery().discover(tmp_path)

        assert [f.relative_path for f in files] == ["app.py"]

    def test_is_ignored_patterns(self):
        discovery = FileDiscovery()
        assert discovery.is_ignored("server/debug.log")
        assert discovery.is_ignored("vendor/x/y.go")
        assert not discovery.is_ignored("src/testing_utils.py")

    def test_size_cap(self, tmp_path):
        _write(tmp_path, "big.js", "a" * 2048)
        _write(tmp_path, "small.js", "a")

        files = FileDiscovery(max_file_size=1024).discover(tmp_path)

        assert [f.relative_path for f in files] == ["small.js"]

    def test_count_cap_is_deterministic(self, tmp_path):
        for i in range(10):
            _write(tmp_path, f"m{i:02d}.py")

        first = FileDiscovery(max_files=4).discover(tmp_path)
        second = FileDiscovery(max_files=4).discover(tmp_path)

        assert [f.relative_path for f in first] == ["m00.py", "m01.py", "m02.py", "m03.py"]
        assert [f.relative_path for f in first] == [f.relative_path for f in second]

    def test_undecodable_file_skipped(self, tmp_path):
        (tmp_path / "binary.py").write_bytes(b"\xff\xfe\x00\x81")
        _write(tmp_path, "ok.py")

        files = FileDiscovery().discover(tmp_path)

        assert [f.relative_path for f in files] == ["ok.py"]

    def test_depth_limit(self, tmp_path):
        _write(tmp_path, "a/b/c/deep.py")
        _write(tmp_path, "a/shallow.py")

        files = FileDiscovery(max_depth=1).discover(tmp_path)

        assert [f.relative_path for f in files] == ["a/shallow.py"]

    def test_symlinks_skipped(self, tmp_path):
        target = _write(tmp_path, "real.py")
        os.symlink(target, tmp_path / "link.py")

        files = FileDiscovery().discover(tmp_path)

        assert [f.relative_path for f in files] == ["real.py"]

    def test_line_count(self, tmp_path):
        _write(tmp_path, "three.py", "a\nb\nc")

        (code_file,) = FileDiscovery().discover(tmp_path)

        assert code_file.line_count == 3
        assert code_file.size == 5
