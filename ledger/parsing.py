"""
Format detection and parser dispatch for bank exports.
The format is inferred from the file extension only; contents are never sniffed.
"""
from pathlib import PurePath
from typing import Callable, Dict, Literal, Optional

from ledger.csv_parser import parse_csv_transactions
from ledger.logger import setup_logger
from ledger.ofx_parser import parse_ofx_transactions
from ledger.schema import ParseResult

logger = setup_logger(__name__)

FileFormat = Literal["csv", "ofx"]

# Extension -> format tag. QFX is OFX with Quicken-specific headers.
SUPPORTED_EXTENSIONS: Dict[str, FileFormat] = {
    "csv": "csv",
    "ofx": "ofx",
    "qfx": "ofx",
}

PARSERS: Dict[str, Callable[[str], ParseResult]] = {
    "csv": parse_csv_transactions,
    "ofx": parse_ofx_transactions,
}

UNSUPPORTED_FORMAT_MESSAGE = "Unsupported file format."


def detect_file_format(filename: Optional[str]) -> Optional[FileFormat]:
    """
    Infer the export format from a filename.

    Args:
        filename: Name of the picked file (e.g. "releve_2024-03.CSV")

    Returns:
        Format tag, or None when the extension is missing or unknown
    """
    if not filename:
        return None

    extension = PurePath(filename).suffix.lower().lstrip(".")
    file_format = SUPPORTED_EXTENSIONS.get(extension)
    if file_format is None:
        logger.info(f"Unsupported file extension '{extension}' for {filename}")
    return file_format


def parse_transactions(text: str, file_format: str) -> ParseResult:
    """
    Run the parser registered for a format tag.

    Returns:
        The parser's ParseResult, or an error result for an unknown tag
    """
    parser = PARSERS.get(file_format)
    if parser is None:
        return ParseResult(error=UNSUPPORTED_FORMAT_MESSAGE)
    return parser(text)
