import json
import logging
from unittest.mock import Mock

import pytest

from deezer_search.crosscutting.logging import (
    CorrelationContext,
    SecretMasker,
    StructuredFormatter,
    catalog_id_var,
    kind_var,
    log_error,
    log_search_complete,
    log_search_start,
    log_with_fields,
    query_var,
    setup_logging,
    stage_var,
)


def _record(message='Test message', fields=None):
    record = Mock()
    record.levelname = 'INFO'
    record.name = 'test_logger'
    record.getMessage.return_value = message
    record.module = 'test_module'
    record.funcName = 'test_function'
    record.lineno = 42
    record.exc_info = None
    record.fields = fields
    return record


class TestSecretMasker:
    """Tests for secret masking functionality."""

    def setup_method(self):
        """Set up test fixtures."""
        self.masker = SecretMasker()

    def test_mask_api_token(self):
        """Test masking API tokens."""
        text = "API token: abc123def456ghi789"
        masked = self.masker.mask_secrets(text)
        assert masked == "API token: abc1**********i789"

    def test_mask_access_token_query_parameter(self):
        """Test masking a token passed in a request URL."""
        text = "GET https://api.deezer.com/playlist/1?access_token=frXyz1234567890abcd&limit=5"
        masked = self.masker.mask_secrets(text)
        assert "frXyz1234567890abcd" not in masked
        assert "access_token=frXy" in masked
        assert masked.endswith("abcd&limit=5")

    def test_mask_deezer_access_token(self):
        """Test masking Deezer access tokens in key: value form."""
        text = "deezer_access_token: frABCDEFGHIJKLMNOPQRSTUVWXYZ0123"
        masked = self.masker.mask_secrets(text)
        assert "frABCDEFGHIJKLMNOPQRSTUVWXYZ0123" not in masked
        assert masked.endswith("0123")

    def test_no_secrets_in_text(self):
        """Test that non-secret text is not modified."""
        text = "Catalog lookup for https://www.deezer.com/en/album/302127"
        assert self.masker.mask_secrets(text) == text

    def test_empty_text(self):
        """Test handling of empty text."""
        assert self.masker.mask_secrets("") == ""
        assert self.masker.mask_secrets(None) is None

    def test_short_secret(self):
        """Test that short values are left alone."""
        assert self.masker.mask_secrets("token: abc123") == "token: abc123"

    def test_mask_dict_masks_nested_strings(self):
        """Test masking secrets inside dictionary values."""
        data = {
            'url': 'https://api.deezer.com/track/1?access_token=abcdefghijklmnop',
            'nested': {'note': 'secret: supersecretvalue123'},
            'items': ['plain', 3],
            'count': 2,
        }
        masked = self.masker.mask_dict(data)

        assert 'abcdefghijklmnop' not in masked['url']
        assert 'supersecretvalue123' not in masked['nested']['note']
        assert masked['items'] == ['plain', 3]
        assert masked['count'] == 2


class TestStructuredFormatter:
    """Tests for structured logging formatter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.formatter = StructuredFormatter()

    def test_format_basic_log(self):
        """Test basic log formatting."""
        data = json.loads(self.formatter.format(_record()))

        assert data['level'] == 'INFO'
        assert data['logger'] == 'test_logger'
        assert data['message'] == 'Test message'
        assert data['line'] == 42
        assert data['ts'].endswith('Z')
        assert 'query' not in data

    def test_format_with_correlation(self):
        """Test formatting with correlation data."""
        with CorrelationContext(query='https://www.deezer.com/album/7', kind='album',
                                catalog_id='7', stage='fetch'):
            data = json.loads(self.formatter.format(_record()))

        assert data['query'] == 'https://www.deezer.com/album/7'
        assert data['kind'] == 'album'
        assert data['catalogId'] == '7'
        assert data['stage'] == 'fetch'

    def test_format_masks_message_and_fields(self):
        """Test formatting with secret masking."""
        record = _record('API token: secret123456', fields={'load_type': 'TRACK_LOADED'})

        data = json.loads(self.formatter.format(record))

        assert data['message'] == 'API token: secr****3456'
        assert data['fields'] == {'load_type': 'TRACK_LOADED'}


class TestCorrelationContext:
    """Tests for correlation context management."""

    def test_values_are_restored_on_exit(self):
        with CorrelationContext(query='outer', kind='album'):
            with CorrelationContext(kind='track', catalog_id='1'):
                assert query_var.get() == 'outer'
                assert kind_var.get() == 'track'
                assert catalog_id_var.get() == '1'
            assert kind_var.get() == 'album'
            assert catalog_id_var.get() is None

        assert query_var.get() is None
        assert kind_var.get() is None
        assert stage_var.get() is None

    def test_values_are_restored_when_body_raises(self):
        with pytest.raises(RuntimeError):
            with CorrelationContext(stage='fetch'):
                raise RuntimeError("boom")

        assert stage_var.get() is None


class TestLogHelpers:
    """Tests for the structured logging helpers."""

    def setup_method(self):
        """Set up test fixtures."""
        self.logger = logging.getLogger('deezer_search.tests.helpers')

    def test_log_with_fields_attaches_fields(self, caplog):
        caplog.set_level(logging.INFO, logger=self.logger.name)

        log_with_fields(self.logger, 'INFO', 'hello', {'a': 1}, b=2)

        assert caplog.records[-1].getMessage() == 'hello'
        assert caplog.records[-1].fields == {'a': 1, 'b': 2}

    def test_log_with_fields_skips_disabled_levels(self, caplog):
        caplog.set_level(logging.WARNING, logger=self.logger.name)

        log_with_fields(self.logger, 'INFO', 'quiet')

        assert caplog.records == []

    def test_search_lifecycle_messages(self, caplog):
        caplog.set_level(logging.INFO, logger=self.logger.name)

        log_search_start(self.logger, 'album', '302127')
        log_search_complete(self.logger, 'album', '302127', 'PLAYLIST_LOADED', 12)

        start, complete = caplog.records[-2:]
        assert start.getMessage() == 'Catalog lookup started'
        assert complete.getMessage() == 'Catalog lookup completed'
        assert complete.fields == {'load_type': 'PLAYLIST_LOADED', 'track_count': 12}

    def test_log_error_records_exception_details(self, caplog):
        caplog.set_level(logging.ERROR, logger=self.logger.name)

        log_error(self.logger, 'Lookup failed', KeyError('tracks'), catalog_id='7')

        record = caplog.records[-1]
        assert record.levelname == 'ERROR'
        assert record.fields['error_type'] == 'KeyError'
        assert record.fields['catalog_id'] == '7'


def test_setup_logging_configures_package_logger(tmp_path):
    log_file = tmp_path / 'deezer.log'
    logger = setup_logging('debug', str(log_file))
    try:
        assert logger.name == 'deezer_search'
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2
        assert all(isinstance(h.formatter, StructuredFormatter) for h in logger.handlers)

        logging.getLogger('deezer_search.tests').debug('written to file')
        for handler in logger.handlers:
            handler.flush()
        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)['message'] == 'written to file'
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
