"""
Compliance Evaluator.

Components:
- thresholds: regulatory ratio thresholds as an ordered tier table
- schemas: ComplianceVerdict, StatusTier, reason codes
- evaluator: pure snapshot → verdict function
- scoring: per-section regulatory checks, composite score and grade
"""
