from __future__ import annotations

import io
from pathlib import Path

import pytest

import decorate


class _BrokenStream(io.StringIO):
    def write(self, text: str) -> int:
        raise BrokenPipeError("pipe closed")


@pytest.mark.parametrize(
    ("out", "expected"),
    [
        ("decorators", "decorators.py"),
        ("decorators.py", "decorators.py"),
        ("charger/decorators", "charger/decorators.py"),
        ("decorators.txt", "decorators.txt.py"),
    ],
)
def test_normalize_output_path_appends_py_suffix(out: str, expected: str) -> None:
    assert decorate.normalize_output_path(Path(out)) == Path(expected)


def test_write_output_to_stream_returns_none() -> None:
    stream = io.StringIO()

    result = decorate.write_output("x = 1\n", None, stream)

    assert result is None
    assert stream.getvalue() == "x = 1\n"


def test_write_output_defaults_to_stdout(capsys: pytest.CaptureFixture[str]) -> None:
    decorate.write_output("x = 1\n", None)

    assert capsys.readouterr().out == "x = 1\n"


def test_write_output_writes_file_verbatim_and_reports_counts(tmp_path: Path) -> None:
    content = "# généré\nx = 1\n"

    result = decorate.write_output(content, tmp_path / "nested" / "decorators")

    assert result is not None
    path = tmp_path / "nested" / "decorators.py"
    assert result.path == path.resolve()
    assert path.read_bytes() == content.encode("utf-8")
    assert result.line_count == 2
    assert result.byte_count == len(content.encode("utf-8"))


def test_write_output_overwrites_existing_file(tmp_path: Path) -> None:
    path = tmp_path / "decorators.py"
    path.write_text("stale\n", encoding="utf-8")

    decorate.write_output("fresh\n", path)

    assert path.read_text(encoding="utf-8") == "fresh\n"


def test_write_output_wraps_filesystem_errors(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(decorate.EmissionError) as exc_info:
        decorate.write_output("x = 1\n", blocker / "decorators")

    assert exc_info.value.path == blocker / "decorators.py"
    assert isinstance(exc_info.value.__cause__, OSError)


def test_write_output_wraps_stream_errors() -> None:
    with pytest.raises(decorate.EmissionError) as exc_info:
        decorate.write_output("x = 1\n", None, _BrokenStream())

    assert exc_info.value.path is None
    assert "pipe closed" in exc_info.value.message
