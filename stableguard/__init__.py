"""
StableGuard — Stablecoin Reserve Compliance Engine.

Architecture:
    stableguard/
    ├── reserves/        # Upstream reserve data → ReserveSnapshot
    ├── compliance/      # Snapshot → ComplianceVerdict (thresholds, scoring)
    ├── oracle/          # Report codec, ledger client, publisher
    ├── alerting/        # Breach alert dispatcher (dedup, webhook channel)
    ├── attestation/     # AI attestation drafting (prompts, text generators)
    ├── regulatory/      # Regulatory text analysis
    ├── workflows/       # Trigger handlers (cron, ledger event, ad hoc HTTP)
    ├── api/             # FastAPI surface for event + ad hoc triggers
    └── middleware/      # Error handling

Data Flow:
    Cycle 1 (cron):  Fetch → Normalize → Evaluate → Encode → Publish
    Cycle 2 (event): ReportUpdated log → Decode → Alert Dispatcher
                                               → Attestation Workflow

Version: 1.0.0
"""

__version__ = "1.0.0"
