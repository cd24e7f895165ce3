from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from catls import __version__, cli, walker
from catls.config import OutputMode
from catls.exceptions import ContentReadError

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_parse_args_parses_limits_and_patterns() -> None:
    max_depth = 2
    settings = cli.parse_args(
        [
            "src",
            "--max-depth",
            str(max_depth),
            "--ignore",
            "dist,build",
            "--ignore",
            ".venv",
            "--format",
            "json",
            "--lines",
            "3",
        ],
    )

    assert settings.path == Path("src")
    assert settings.max_depth == max_depth
    assert settings.ignore == ["dist", "build", ".venv"]
    assert settings.format is OutputMode.JSON
    assert settings.lines == 3


@pytest.mark.unit
def test_parse_args_defaults() -> None:
    settings = cli.parse_args([])

    assert settings.path == Path(".")
    assert settings.ignore == [".git", "node_modules"]
    assert settings.format is OutputMode.MARKDOWN
    assert settings.threaded is False


@pytest.mark.unit
def test_parse_args_env_defaults_lose_to_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATLS_MAX_DEPTH", "4")
    monkeypatch.setenv("CATLS_FORMAT", "json")

    from_env = cli.parse_args([])
    from_flags = cli.parse_args(["--max-depth", "1"])

    assert from_env.max_depth == 4
    assert from_env.format is OutputMode.JSON
    assert from_flags.max_depth == 1


@pytest.mark.unit
def test_parse_args_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_parse_args_rejects_unknown_format() -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args(["--format", "xml"])

    assert exc_info.value.code == 2


@pytest.mark.unit
@pytest.mark.parametrize("argv", [["--lines", "-1"], ["--buffer-size", "0"]])
def test_parse_args_out_of_range_value_is_usage_error(
    argv: list[str],
    capsys: pytest.CaptureFixture[str],
) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main([".", *argv])

    assert exc_info.value.code == 2
    err = capsys.readouterr().err
    assert "usage: catls" in err
    assert "greater than or equal to" in err


@pytest.mark.unit
def test_parse_args_bad_env_default_is_usage_error(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("CATLS_MAX_DEPTH", "deep")

    with pytest.raises(SystemExit) as exc_info:
        cli.parse_args([])

    assert exc_info.value.code == 2
    assert "max_depth" in capsys.readouterr().err


@pytest.mark.unit
def test_main_writes_json_to_stdout(sample_tree: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(sample_tree), "--format", "json", "--max-depth", "1"])

    assert exit_code == 0
    parsed = json.loads(capsys.readouterr().out)
    assert [obj["Path"] for obj in parsed] == ["a.txt", "sub"]
    assert parsed[0]["Content"] == "hello\n"


@pytest.mark.unit
def test_main_missing_root_is_fatal(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(tmp_path / "missing")])

    assert exit_code == 1
    captured = capsys.readouterr()
    assert "catls: error: Root path does not exist" in captured.err
    assert not captured.out


@pytest.mark.unit
def test_main_bad_root_leaves_output_untouched(tmp_path: Path) -> None:
    output = tmp_path / "out.md"
    output.write_text("previous run", encoding="utf-8")

    exit_code = cli.main([str(tmp_path / "missing"), "--output", str(output)])

    assert exit_code == 1
    assert output.read_text(encoding="utf-8") == "previous run"


@pytest.mark.unit
def test_main_unopenable_output_is_fatal(sample_tree: Path, capsys: pytest.CaptureFixture[str]) -> None:
    exit_code = cli.main([str(sample_tree), "--output", str(sample_tree / "no" / "such" / "out.md")])

    assert exit_code == 1
    assert "Cannot open output" in capsys.readouterr().err


@pytest.mark.unit
def test_main_per_entry_errors_keep_exit_code_zero(
    sample_tree: Path,
    mocker: MockerFixture,
    capsys: pytest.CaptureFixture[str],
) -> None:
    mocker.patch.object(
        walker,
        "read_content",
        side_effect=ContentReadError(path=sample_tree / "a.txt", reason="Permission denied"),
    )

    exit_code = cli.main([str(sample_tree)])

    assert exit_code == 0
    assert "⚠️ Error: Permission denied" in capsys.readouterr().out


@pytest.mark.unit
def test_main_log_file_option(sample_tree: Path, tmp_path: Path, mocker: MockerFixture) -> None:
    setup = mocker.patch.object(cli, "setup_logging")
    log_file = tmp_path / "catls.log"

    exit_code = cli.main([str(sample_tree), "--output", str(tmp_path / "out.md"), "--log-file", str(log_file)])

    assert exit_code == 0
    setup.assert_called_once_with(str(log_file))
