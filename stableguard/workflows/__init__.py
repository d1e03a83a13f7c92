"""
Trigger handlers. Each call is one independent invocation:

- health_check:  scheduled, snapshot → verdict → report → publish per coin
- report_event:  ledger event, decode → breach alert + attestation
- adhoc:         HTTP {text} → regulatory text generation
- regulatory:    scheduled regulatory text scan
- safeguard:     scheduled safeguard controller evaluation
"""
