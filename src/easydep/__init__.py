"""Hoist common Cargo workspace dependencies into ``[workspace.dependencies]``."""

__version__ = "0.1.0"
