"""Collaborator gateways shared by workflows (data fetch, secrets, text generation)."""
