from symptomrelay.logger import ROOT_LOGGER_NAME, get_logger, preview


def test_module_loggers_share_the_package_handler():
    root = get_logger(ROOT_LOGGER_NAME)

    assert len(root.handlers) == 1
    assert root.propagate is False
    assert get_logger("symptomrelay.services.relay").handlers == []
    assert get_logger("__main__").name == "symptomrelay.__main__"


def test_preview_truncates_long_text():
    assert preview("short") == "short"
    assert preview("x" * 60) == "x" * 50 + "..."
    assert preview("abcdef", limit=3) == "abc..."
