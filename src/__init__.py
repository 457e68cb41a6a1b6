"""
Update Ingestion Service

Accepts release manifests keyed by commit, records each commit exactly once,
and announces every newly accepted update to live subscribers before the
creating request completes.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
