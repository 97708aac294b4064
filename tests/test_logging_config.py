import logging
from unittest.mock import patch

from catalog_app.logging_config import ConsoleNoiseFilter, SensitiveDataFilter


def make_record(msg, args=(), name="catalog_core.catalog_client", level=logging.INFO):
    return logging.LogRecord(name, level, __file__, 1, msg, args, None)


def test_masks_client_secret():
    with patch("catalog_app.logging_config.IGDB_CLIENT_SECRET", "s3cr3t"):
        record = make_record("POST ?client_secret=s3cr3t&grant_type=client_credentials")
        SensitiveDataFilter().filter(record)

    assert "s3cr3t" not in record.msg
    assert "***CLIENT_SECRET***" in record.msg


def test_masks_bearer_tokens_and_access_tokens():
    record = make_record("headers=%s body=%s", ("Authorization: Bearer abc.def-123", '{"access_token": "xyz789"}'))
    SensitiveDataFilter().filter(record)

    message = record.getMessage()
    assert "abc.def-123" not in message
    assert "xyz789" not in message
    assert message.count("***TOKEN***") == 2


def test_console_noise_filter():
    noise = ConsoleNoiseFilter()
    assert noise.filter(make_record("debug chatter", name="sqlalchemy.engine", level=logging.DEBUG)) is False
    assert noise.filter(make_record("pool error", name="sqlalchemy.pool", level=logging.ERROR)) is True
    assert noise.filter(make_record("Synced 3 games", name="catalog_core.sync")) is True
