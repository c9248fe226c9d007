"""
Shared utilities for the sales pipeline.

Keep helpers here small and dependency-free so DAG parsing stays reliable.
"""

from .s3_paths import build_s3_uri, join_s3_key, sales_keys_from_config

__all__ = ["join_s3_key", "build_s3_uri", "sales_keys_from_config"]
