"""
Tests for storage backends.
"""

import pytest
from surveykit.backends import FileBackend, MemoryBackend
from surveykit.errors import StorageError


def test_memory_backend():
    backend = MemoryBackend({"k": "old"})
    assert backend.load("k") == "old"
    backend.save("k", "new")
    assert backend.load("k") == "new"
    assert backend.load("other") is None
    assert backend.save_count == 1


def test_file_backend_roundtrip(tmp_path):
    backend = FileBackend(tmp_path / "state")
    assert backend.load("survey_creator_data") is None
    backend.save("survey_creator_data", '{"surveys": []}')
    assert backend.load("survey_creator_data") == '{"surveys": []}'
    assert (tmp_path / "state" / "survey_creator_data.json").exists()


def test_file_backend_replaces_whole_blob(tmp_path):
    backend = FileBackend(tmp_path)
    backend.save("k", "a much longer first blob")
    backend.save("k", "short")
    assert backend.load("k") == "short"
    assert [p.name for p in tmp_path.iterdir()] == ["k.json"]


def test_file_backend_sanitizes_keys(tmp_path):
    backend = FileBackend(tmp_path, suffix=".yaml")
    assert backend.path_for("../team a").name == ".._team_a.yaml"
    assert backend.path_for("../team a").parent == tmp_path


def test_file_backend_save_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(StorageError):
        FileBackend(blocker).save("k", "blob")


def test_file_backend_read_error(tmp_path):
    (tmp_path / "k.json").mkdir()
    with pytest.raises(StorageError):
        FileBackend(tmp_path).load("k")
