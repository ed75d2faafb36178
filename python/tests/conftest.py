"""Shared fixtures for building package.json trees on disk."""

import json

import pytest


@pytest.fixture
def write_manifest(tmp_path):
    """Return a helper writing a package.json below tmp_path and returning its path."""

    def _write(relative_dir, content):
        directory = tmp_path / relative_dir
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / "package.json"
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_text(json.dumps(content), encoding="utf-8")
        return str(path)

    return _write
