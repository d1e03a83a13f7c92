"""
Oracle: report wire format and publication.

Components:
- schemas: ComplianceReport, ReportEvent, submission results
- codec: fixed-layout ABI encoding/decoding, ReportUpdated event decoding
- ledger: LedgerClient capability (relay over HTTP, in-memory simulation)
- publisher: exactly-once-per-cycle report submission
"""
