"""
Loaders for configured remote sources.
"""

from app.sources.loader import load_source_configs, parse_source_configs

__all__ = [
    "load_source_configs",
    "parse_source_configs",
]
