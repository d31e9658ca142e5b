from __future__ import annotations

import logging

from ecom_analytics.logging import logger


def test_init_logging_writes_to_rotating_file(tmp_path, monkeypatch):
    monkeypatch.setattr(logger, "_INITIALIZED", False)
    root = logging.getLogger("ecom_analytics")
    before = list(root.handlers)
    log_file = tmp_path / "logs" / "app.log"
    try:
        logger.init_logging("DEBUG", str(log_file))
        logger.init_logging("DEBUG", str(log_file))  # second call is a no-op
        added = [h for h in root.handlers if h not in before]
        assert len(added) == 2

        logger.get_logger("reports.runner").info("Report finished")
        for h in added:
            h.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "| INFO | ecom_analytics.reports.runner | Report finished" in text
    finally:
        for h in [h for h in root.handlers if h not in before]:
            root.removeHandler(h)
            h.close()
        root.setLevel(logging.NOTSET)
