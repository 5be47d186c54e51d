"""Tests for clipboard copy feedback."""

import pytest


def test_copy_success(settings):
    from radclean.clipboard import copy_narrative

    written = []
    feedback = copy_narrative("Report text.", writer=written.append, settings=settings, clock=lambda: 100.0)

    assert written == ["Report text."]
    assert feedback.ok
    assert feedback.message == "Copied"
    assert feedback.expires_at == pytest.approx(101.2)
    assert feedback.visible(101.0)
    assert not feedback.visible(101.3)


def test_copy_failure_is_reported_not_raised(settings, caplog):
    from radclean.clipboard import copy_narrative

    def broken(text):
        raise OSError("no display")

    feedback = copy_narrative("Report text.", writer=broken, settings=settings, clock=lambda: 10.0)

    assert not feedback.ok
    assert feedback.message == "Copy failed"
    assert feedback.expires_at == pytest.approx(11.5)
    assert "no display" in caplog.text


def test_system_writer_without_clipboard_command(monkeypatch):
    from radclean import clipboard
    from radclean.errors import ClipboardUnavailableError

    monkeypatch.setattr(clipboard.shutil, "which", lambda name: None)
    with pytest.raises(ClipboardUnavailableError):
        clipboard.system_clipboard_writer("x")

    feedback = clipboard.copy_narrative("x")
    assert feedback.message == "Copy failed"


def test_system_writer_uses_first_available_command(monkeypatch):
    from radclean import clipboard

    calls = []
    monkeypatch.setattr(clipboard.shutil, "which", lambda name: "/usr/bin/xsel" if name == "xsel" else None)
    monkeypatch.setattr(clipboard.subprocess, "run", lambda cmd, **kw: calls.append((cmd, kw["input"])))

    clipboard.system_clipboard_writer("héllo")
    assert calls == [(["xsel", "--clipboard", "--input"], "héllo".encode("utf-8"))]
