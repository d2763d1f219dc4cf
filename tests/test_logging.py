import logging

from etrade_utils.converter import configure_logging


def _file_handlers(logger):
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


def test_log_dir_creates_log_file(tmp_path, monkeypatch, package_logger):
    monkeypatch.delenv("LOG_DIR", raising=False)
    log_dir = tmp_path / "logs"
    configure_logging(debug=False, log_dir=str(log_dir))
    handlers = _file_handlers(package_logger)
    assert len(handlers) == 1
    logging.getLogger("etrade_utils.converter").info("hello from the converter")
    handlers[0].flush()
    log_file = log_dir / "etrade_converter.log"
    assert log_file.exists()
    assert "hello from the converter" in log_file.read_text(encoding="utf-8")


def test_existing_log_is_archived(tmp_path, monkeypatch, package_logger):
    monkeypatch.delenv("LOG_DIR", raising=False)
    (tmp_path / "etrade_converter.log").write_text("previous run\n", encoding="utf-8")
    configure_logging(debug=False, log_dir=str(tmp_path))
    archived = list(tmp_path.glob("etrade_converter_*.log"))
    assert len(archived) == 1
    assert archived[0].read_text(encoding="utf-8") == "previous run\n"
    assert (tmp_path / "etrade_converter.log").read_text(encoding="utf-8") == ""


def test_log_dir_from_environment(tmp_path, monkeypatch, package_logger):
    monkeypatch.setenv("LOG_DIR", str(tmp_path))
    monkeypatch.delenv("DEBUG", raising=False)
    configure_logging()
    assert len(_file_handlers(package_logger)) == 1
    assert (tmp_path / "etrade_converter.log").exists()


def test_unusable_log_dir_is_ignored(tmp_path, monkeypatch, package_logger):
    monkeypatch.delenv("LOG_DIR", raising=False)
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("", encoding="utf-8")
    configure_logging(debug=False, log_dir=str(not_a_dir))
    assert _file_handlers(package_logger) == []


def test_debug_level(package_logger):
    configure_logging(debug=True, log_dir="")
    assert package_logger.level == logging.DEBUG
    configure_logging(debug=False, log_dir="")
    assert package_logger.level == logging.INFO
