"""Tests for settings, logging setup and the alert journal."""

import json
import logging
from decimal import Decimal
from pathlib import Path

import pytest

from ims.domain.results import CommitPhase, CompensationStatus, LedgerFailure
from ims.infrastructure.alerts import JournalAlertSink
from ims.infrastructure.config import DEFAULT_DATA_DIR, Settings
from ims.infrastructure.logging_config import ContextFormatter, configure_logging


class TestSettings:

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.data_dir == DEFAULT_DATA_DIR
        assert settings.log_level == "INFO"
        assert settings.movement_history_limit == 100
        assert settings.cas_retries == 3
        assert settings.alerts_path == DEFAULT_DATA_DIR / "alerts.jsonl"

    def test_overrides(self, tmp_path):
        settings = Settings.from_env({
            "IMS_DATA_DIR": str(tmp_path),
            "IMS_LOG_LEVEL": "debug",
            "IMS_MOVEMENT_HISTORY_LIMIT": "25",
            "IMS_CAS_RETRIES": "0",
            "IMS_ALERTS_FILE": str(tmp_path / "a.jsonl"),
        })
        assert settings.data_dir == Path(tmp_path)
        assert settings.log_level == "DEBUG"
        assert settings.movement_history_limit == 25
        assert settings.cas_retries == 0
        assert settings.alerts_path == tmp_path / "a.jsonl"

    @pytest.mark.parametrize("env", [
        {"IMS_LOG_LEVEL": "loud"},
        {"IMS_MOVEMENT_HISTORY_LIMIT": "0"},
        {"IMS_MOVEMENT_HISTORY_LIMIT": "many"},
        {"IMS_CAS_RETRIES": "-1"},
    ])
    def test_invalid_values_rejected(self, env):
        with pytest.raises(ValueError):
            Settings.from_env(env)


class TestLogging:

    def test_extra_rendered_as_key_value(self):
        record = logging.LogRecord("ims.test", logging.INFO, __file__, 1, "movement recorded", None, None)
        record.item_id = "gloves"
        record.quantity = "5"
        line = ContextFormatter("%(message)s").format(record)
        assert line == "movement recorded | item_id=gloves quantity=5"

    def test_configure_is_idempotent(self):
        configure_logging("WARNING")
        configure_logging("INFO")
        logger = logging.getLogger("ims")
        ours = [h for h in logger.handlers if getattr(h, "_ims_handler", False)]
        assert len(ours) == 1
        assert logger.level == logging.INFO


class TestJournalAlertSink:

    def test_appends_one_line_per_alert(self, tmp_path, caplog):
        path = tmp_path / "alerts" / "alerts.jsonl"
        sink = JournalAlertSink(path)
        failure = LedgerFailure(
            item_id="gloves",
            phase=CommitPhase.LEDGER_APPEND,
            compensation=CompensationStatus.REVERT_FAILED,
            previous_quantity=Decimal("50"),
            attempted_quantity=Decimal("30"),
            message="inconsistent",
        )

        with caplog.at_level(logging.CRITICAL, logger="ims.alerts"):
            sink.ledger_inconsistent(failure)
            sink.ledger_inconsistent(failure)

        lines = path.read_text().splitlines()
        assert len(lines) == 2
        entry = json.loads(lines[0])
        assert entry["alert"] == "ledger_inconsistent"
        assert entry["item_id"] == "gloves"
        assert entry["compensation"] == "revert_failed"
        assert entry["previous_quantity"] == "50"
        assert any(r.levelno == logging.CRITICAL for r in caplog.records)
