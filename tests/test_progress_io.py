import json
from pathlib import Path

import pytest

from skilltree.core.errors import ProgressLoadError
from skilltree.core.io.progress import load_progress, save_progress


def test_missing_progress_file_is_empty(tmp_path: Path):
    assert load_progress(str(tmp_path / "progress.json")) == []


def test_save_then_load(tmp_path: Path):
    p = tmp_path / "nested" / "progress.json"
    save_progress(str(p), ["b", "a", "b"])
    assert json.loads(p.read_text(encoding="utf-8")) == ["a", "b"]
    assert load_progress(str(p)) == ["a", "b"]


def test_progress_parse_error(tmp_path: Path):
    p = tmp_path / "progress.json"
    p.write_text("[oops", encoding="utf-8")
    with pytest.raises(ProgressLoadError) as exc:
        load_progress(str(p))
    assert exc.value.code == "E_PROGRESS_PARSE"


@pytest.mark.parametrize("text", ['{"done": ["a"]}', '["a", 1]'])
def test_progress_shape_error(tmp_path: Path, text: str):
    p = tmp_path / "progress.json"
    p.write_text(text, encoding="utf-8")
    with pytest.raises(ProgressLoadError) as exc:
        load_progress(str(p))
    assert exc.value.code == "E_PROGRESS_SHAPE"


def test_progress_not_utf8(tmp_path: Path):
    p = tmp_path / "progress.json"
    p.write_bytes(b'["\xff"]')
    with pytest.raises(ProgressLoadError) as exc:
        load_progress(str(p))
    assert exc.value.code == "E_FILE_ENCODING"
    assert exc.value.file == str(p)


def test_progress_path_is_directory(tmp_path: Path):
    with pytest.raises(ProgressLoadError) as exc:
        load_progress(str(tmp_path))
    assert exc.value.code == "E_FILE_READ"
