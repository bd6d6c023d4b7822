"""State/store layer.

The single place where validated updates replace the persisted spatial
snapshot. Snapshots are immutable; every update produces a new one.
"""
