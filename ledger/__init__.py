"""
Transaction ingestion and classification core.

This package contains:
- config: Settings loaded from the environment
- csv_parser / ofx_parser: Bank export parsers
- dates: Day-first and OFX date conversion
- db: Store contract and SQLite adapter
- exceptions: Custom exception classes
- logger: Logging configuration
- matching: Levenshtein matching and category recommendation
- parsing: Format detection and parser dispatch
- recurrence: Next-occurrence estimate for recurring transactions
- schema: Pydantic models
"""
