"""Creation configuration reconciliation engine.

Merges suggested defaults into an in-progress training plan configuration,
tracks provenance, consolidates blocking conflicts, applies quick fixes and
keeps the composite weight vector normalized.
"""
