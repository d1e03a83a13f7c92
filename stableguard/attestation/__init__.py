"""
Attestation Drafting Workflow.

Components:
- schemas: Attestation
- prompts: system instruction, deterministic compliance-data context
- workflow: context → text generator → keccak256 proof hash → webhook
"""
