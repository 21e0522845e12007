"""Unit tests for logging configuration."""

import logging

import pytest

from imagepig.core.client import ImagePig
from imagepig.logging_config import (
    REDACTED,
    SecretRedactingFilter,
    get_logger,
    log_prompts,
    redact_secret,
    set_verbosity,
)


@pytest.mark.unit
class TestSetVerbosity:
    """Test set_verbosity level and log_prompts flag."""

    def test_level_0_sets_info_no_prompts(self):
        set_verbosity(0)
        root = logging.getLogger("imagepig")
        assert root.level == logging.INFO
        assert log_prompts() is False

    def test_level_1_sets_info_with_prompts(self):
        set_verbosity(1)
        root = logging.getLogger("imagepig")
        assert root.level == logging.INFO
        assert log_prompts() is True

    def test_level_2_sets_debug_with_prompts(self):
        set_verbosity(2)
        root = logging.getLogger("imagepig")
        assert root.level == logging.DEBUG
        assert log_prompts() is True

    def test_negative_treated_as_default(self):
        set_verbosity(-1)
        root = logging.getLogger("imagepig")
        assert root.level == logging.INFO
        assert log_prompts() is False

    def test_quiet_sets_warning_and_no_prompts(self):
        set_verbosity(2, quiet=True)
        root = logging.getLogger("imagepig")
        assert root.level == logging.WARNING
        assert log_prompts() is False
        set_verbosity(0)

    def test_handler_installed_once(self):
        set_verbosity(0)
        set_verbosity(2)
        set_verbosity(1, quiet=True)
        root = logging.getLogger("imagepig")
        assert len(root.handlers) == 1
        set_verbosity(0)


@pytest.mark.unit
class TestGetLogger:
    """Test get_logger returns child loggers under imagepig."""

    def test_returns_imagepig_child(self):
        log = get_logger("core.client")
        assert log.name == "imagepig.core.client"

    def test_full_name_unchanged(self):
        log = get_logger("imagepig.core.result")
        assert log.name == "imagepig.core.result"

    def test_root_name_unchanged(self):
        log = get_logger("imagepig")
        assert log.name == "imagepig"

    def test_redaction_filter_attached_once(self):
        get_logger("core.extra")
        log = get_logger("core.extra")
        redactors = [f for f in log.filters if isinstance(f, SecretRedactingFilter)]
        assert len(redactors) == 1


@pytest.mark.unit
class TestRedaction:
    """Test that registered secrets never appear in imagepig log output."""

    def test_client_api_key_is_masked(self, caplog):
        client = ImagePig("super-secret-key-123")
        with caplog.at_level("INFO", logger="imagepig"):
            get_logger("core.client").warning("using key=%s", client.api_key)
        assert "super-secret-key-123" not in caplog.text
        assert f"key={REDACTED}" in caplog.text

    def test_key_in_message_template_is_masked(self, caplog):
        redact_secret("template-secret")
        with caplog.at_level("INFO", logger="imagepig"):
            get_logger("core.result").info("header Api-Key: template-secret")
        assert "template-secret" not in caplog.text

    def test_unrelated_records_unchanged(self, caplog):
        redact_secret("another-secret")
        with caplog.at_level("INFO", logger="imagepig"):
            get_logger("core.result").info("saved %s", "out.jpeg")
        record = caplog.records[-1]
        assert record.getMessage() == "saved out.jpeg"
        assert record.args == ("out.jpeg",)

    def test_longer_secret_masked_whole(self):
        f = SecretRedactingFilter()
        f.add("abc")
        f.add("abcdef")
        record = logging.LogRecord("imagepig", logging.INFO, __file__, 1, "k=%s", ("abcdef",), None)
        assert f.filter(record) is True
        assert record.getMessage() == f"k={REDACTED}"

    def test_empty_secret_ignored(self):
        f = SecretRedactingFilter()
        f.add("")
        record = logging.LogRecord("imagepig", logging.INFO, __file__, 1, "plain", (), None)
        assert f.filter(record) is True
        assert record.getMessage() == "plain"
