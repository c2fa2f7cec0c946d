"""
Module: test_settings.py
Description: Unit tests for processor settings.
"""

import pytest
from pydantic import ValidationError

from conftest import QUEUE_URL, TestSettings


class TestSettingsValidation:

    def test_defaults(self):
        config = TestSettings()

        assert config.queue_url is None
        assert config.max_delete_batch_size == 10
        assert config.max_workers == 1
        assert config.suppress_exception is False
        assert config.log_level == "INFO"

    def test_log_level_normalized(self):
        assert TestSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="log_level must be one of"):
            TestSettings(log_level="LOUD")

    def test_queue_url_validated(self):
        assert TestSettings(queue_url=QUEUE_URL).queue_url == QUEUE_URL
        assert TestSettings(queue_url="").queue_url is None

        with pytest.raises(ValidationError, match="HTTP/HTTPS URL"):
            TestSettings(queue_url="sqs://queue")

    @pytest.mark.parametrize("size", [0, 11])
    def test_delete_batch_size_bounds(self, size):
        with pytest.raises(ValidationError):
            TestSettings(max_delete_batch_size=size)

    def test_reads_environment(self, monkeypatch):
        from sqs_batch.config.settings import Settings

        monkeypatch.setenv("MAX_WORKERS", "4")
        monkeypatch.setenv("SUPPRESS_EXCEPTION", "true")

        config = Settings(_env_file=None)
        assert config.max_workers == 4
        assert config.suppress_exception is True
