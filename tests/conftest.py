"""
Shared fixtures for the ledger test suite.
"""
from typing import List, Sequence

import pytest

from ledger.config import reset_settings
from ledger.schema import HistoricalTransaction, NormalizedTransactionRecord

SAMPLE_CSV = (
    "Date operation;Libelle;Debit;Credit\n"
    "01/03/2024;Coffee;3,50;0\n"
    '"05/03/2024";"Salary";;"2500,00"\n'
    "12/03/2024;Supermarket;42,10;\n"
)

SAMPLE_OFX = (
    "OFXHEADER:100\r\n"
    "DATA:OFXSGML\r\n"
    "<OFX><BANKMSGSRSV1><STMTTRNRS><STMTRS><BANKTRANLIST>\r\n"
    "<STMTTRN>\r\n"
    "<TRNTYPE>DEBIT\r\n"
    "<DTPOSTED>20240115120000\r\n"
    "<TRNAMT>-12.30\r\n"
    "<NAME>LANDLORD SAS\r\n"
    "<MEMO>Rent\r\n"
    "</STMTTRN>\r\n"
    "<STMTTRN>\r\n"
    "<TRNTYPE>CREDIT\r\n"
    "<DTPOSTED>20240120\r\n"
    "<TRNAMT>1500,00\r\n"
    "<NAME>Employer\r\n"
    "</STMTTRN>\r\n"
    "</BANKTRANLIST></STMTRS></STMTTRNRS></BANKMSGSRSV1></OFX>\r\n"
)


class InMemoryStore:
    """Store fake enforcing the (label, amount, date, owner) uniqueness key."""

    def __init__(self, owner_id: str = "tester", history: Sequence[HistoricalTransaction] = ()):
        self.owner_id = owner_id
        self.rows: List[NormalizedTransactionRecord] = []
        self.keys = set()
        self.history = list(history)
        self.insert_calls = 0

    async def bulk_insert(self, records):
        self.insert_calls += 1
        inserted = []
        for record in records:
            key = record.dedup_key(self.owner_id)
            if key in self.keys:
                continue
            self.keys.add(key)
            self.rows.append(record)
            inserted.append(record)
        return inserted

    async def list_all_with_category(self):
        return list(self.history)


class FailingStore(InMemoryStore):
    """Store fake whose insert always fails."""

    async def bulk_insert(self, records):
        self.insert_calls += 1
        raise RuntimeError("connection reset by peer")


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch, tmp_path):
    """Each test gets fresh settings pointing at a temporary database."""
    for var in ("LOG_LEVEL", "CSV_DELIMITER", "FUZZY_MAX_DISTANCE", "AUTO_CATEGORIZE", "OWNER_ID"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("DATABASE_PATH", str(tmp_path / "ledger.db"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV


@pytest.fixture
def sample_ofx() -> str:
    return SAMPLE_OFX


@pytest.fixture
def memory_store() -> InMemoryStore:
    return InMemoryStore()
