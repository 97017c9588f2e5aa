"""
Unit tests for the OFX statement parser.
"""
from decimal import Decimal

from ledger.ofx_parser import parse_ofx_transactions


def test_single_unterminated_block():
    """Closing tags are optional."""
    result = parse_ofx_transactions("<STMTTRN><TRNAMT>-12.30<DTPOSTED>20240115<MEMO>Rent")

    assert result.error is None
    assert result.invalid_count == 0
    assert len(result.records) == 1
    record = result.records[0]
    assert record.label == "Rent"
    assert record.amount == Decimal("-12.30")
    assert record.transaction_date == "2024-01-15"


def test_sample_statement(sample_ofx):
    """MEMO is preferred over NAME; NAME is the fallback."""
    result = parse_ofx_transactions(sample_ofx)

    assert result.invalid_count == 0
    assert [r.label for r in result.records] == ["Rent", "Employer"]
    assert result.records[1].amount == Decimal("1500.00")
    assert result.records[1].transaction_date == "2024-01-20"


def test_incomplete_blocks_are_counted():
    text = (
        "<STMTTRN><DTPOSTED>20240101<MEMO>No amount</STMTTRN>"
        "<STMTTRN><TRNAMT>-1.00<MEMO>No date</STMTTRN>"
        "<STMTTRN><TRNAMT>abc<DTPOSTED>20240101<MEMO>Bad amount</STMTTRN>"
        "<STMTTRN><TRNAMT>-1.00<DTPOSTED>2024<MEMO>Bad date</STMTTRN>"
        "<STMTTRN><TRNAMT>-1.00<DTPOSTED>20240101</STMTTRN>"
        "<STMTTRN><TRNAMT>-4.00<DTPOSTED>20240102<NAME>Kiosk</STMTTRN>"
    )
    result = parse_ofx_transactions(text)

    assert result.invalid_count == 5
    assert [r.label for r in result.records] == ["Kiosk"]


def test_scan_stops_at_closing_tag():
    """Tags after </STMTTRN> do not leak into the block."""
    text = (
        "<STMTTRN><TRNAMT>-2.00<DTPOSTED>20240301</STMTTRN>\n"
        "<LEDGERBAL><NAME>Balance</LEDGERBAL>"
    )
    result = parse_ofx_transactions(text)

    assert result.records == []
    assert result.invalid_count == 1


def test_no_transactions():
    result = parse_ofx_transactions("<OFX></OFX>")
    assert result.records == []
    assert result.invalid_count == 0
    assert result.error is None


def test_unexpected_failure_returns_error():
    result = parse_ofx_transactions(12345)

    assert result.records == []
    assert result.invalid_count == 0
    assert result.error
