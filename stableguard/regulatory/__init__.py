"""Regulatory text analysis: scheduled scan and ad hoc parsing."""
