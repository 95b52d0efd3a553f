import logging

from stockcompare.utils.logging_redaction import RedactingFilter, install_redaction_filter, redact_message


def test_redacts_finnhub_token_query_param():
    message = "GET https://finnhub.io/api/v1/stock/profile2?symbol=AAPL&token=abc123secret"
    redacted = redact_message(message)
    assert "abc123secret" not in redacted
    assert "token=[REDACTED]" in redacted
    assert "symbol=AAPL" in redacted


def test_redacts_key_value_pairs():
    assert "s3cr3t" not in redact_message("FINNHUB_API_KEY=s3cr3t")
    assert "s3cr3t" not in redact_message("api_key: s3cr3t")


def test_filter_rewrites_formatted_record():
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Calling %s",
        args=("https://finnhub.io/api/v1/company-news?token=xyz",),
        exc_info=None,
    )
    assert RedactingFilter().filter(record) is True
    assert "xyz" not in record.getMessage()
    assert record.args == ()


def test_install_is_idempotent():
    install_redaction_filter()
    install_redaction_filter()
    root = logging.getLogger()
    assert sum(isinstance(f, RedactingFilter) for f in root.filters) == 1
