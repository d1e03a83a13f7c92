"""
Reserve Snapshot Normalizer.

Components:
- schemas: ReserveSnapshot and data-quality markers
- normalizer: upstream payload → canonical ReserveSnapshot (fallback on failure)
"""
