import moviesearch.logger as logger


def test_truncate_line_marks_truncated():
    out = logger.truncate_line("x" * 50, max_chars=20)
    assert out.endswith("(truncated)")
    assert len(out) <= 22
    assert logger.truncate_line("short", max_chars=20) == "short"


def test_silent_mode_suppresses_warnings(monkeypatch):
    calls = []

    class _Recorder:
        def warning(self, *args):
            calls.append(args)

    monkeypatch.setattr(logger, "is_silent_mode", lambda: True)
    monkeypatch.setattr(logger, "_ensure_configured", lambda: _Recorder())

    logger.warning("hidden")
    logger.warning("shown", always=True)

    assert calls == [("shown",)]


def test_debug_ctx_uses_progress_in_silent_debug(monkeypatch, capsys):
    monkeypatch.setattr(logger, "is_debug_mode", lambda: True)
    monkeypatch.setattr(logger, "is_silent_mode", lambda: True)

    logger.debug_ctx("search", "hello")

    assert capsys.readouterr().out == "[SEARCH][DEBUG] hello\n"


def test_debug_ctx_noop_without_debug(monkeypatch, capsys):
    monkeypatch.setattr(logger, "is_debug_mode", lambda: False)

    logger.debug_ctx("search", "hello")

    assert capsys.readouterr().out == ""


def test_get_logger_is_idempotent():
    logger.reset_for_tests()
    first = logger.get_logger()
    assert logger.get_logger() is first
    assert first.name == logger.LOGGER_NAME
