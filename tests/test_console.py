import pytest

from thera import console
from thera.console import LogFlags, check, log_error, log_info, log_warning


@pytest.fixture
def plain(monkeypatch):
    monkeypatch.setattr(console.settings, "flags", LogFlags.NONE)


def test_info_without_prefix(plain, capsys):
    log_info("hello")
    assert capsys.readouterr().out == "[INFO] hello\n"


def test_warning_without_prefix(plain, capsys):
    log_warning("careful")
    assert capsys.readouterr().out == "[WARN] careful\n"


def test_error_without_throw_only_prints(plain, capsys):
    log_error("boom", False)
    captured = capsys.readouterr()
    assert captured.out == "[ERROR] boom\n"
    assert captured.err == ""


def test_error_with_throw_raises(plain, capsys):
    with pytest.raises(RuntimeError, match="fatal"):
        log_error("fatal", True)
    captured = capsys.readouterr()
    assert captured.out == "[ERROR] fatal\n"
    assert captured.err == "fatal"


def test_check_passes_silently(plain, capsys):
    check(True, "never shown")
    assert capsys.readouterr().out == ""


def test_check_failure_raises(plain, capsys):
    with pytest.raises(RuntimeError, match="bad state"):
        check(False, "bad state")
    assert capsys.readouterr().out == "[ERROR] bad state\n"


def test_source_info_names_the_caller(monkeypatch, capsys):
    monkeypatch.setattr(console.settings, "flags", LogFlags.SOURCE_INFO)
    log_info("where")
    out = capsys.readouterr().out
    assert out.startswith("[INFO] (Line ")
    assert "@ test_source_info_names_the_caller @" in out
    assert __file__ in out
    assert out.endswith(") where\n")


def test_check_reports_its_caller(monkeypatch, capsys):
    monkeypatch.setattr(console.settings, "flags", LogFlags.SOURCE_INFO)
    with pytest.raises(RuntimeError):
        check(False, "x")
    assert "@ test_check_reports_its_caller @" in capsys.readouterr().out


def test_time_prefix_is_bracketed(monkeypatch, capsys):
    monkeypatch.setattr(console.settings, "flags", LogFlags.TIME)
    log_warning("tick")
    out = capsys.readouterr().out
    assert out.startswith("[WARN] [")
    assert out.endswith("] tick\n")


def test_default_flags_include_both():
    assert LogFlags.TIME in console.LogSettings().flags
    assert LogFlags.SOURCE_INFO in console.LogSettings().flags