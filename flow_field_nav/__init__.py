"""Flow field navigation: shared-goal steering for many agents on a tile grid."""

__version__ = "0.1.0"
