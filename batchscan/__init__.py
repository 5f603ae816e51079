"""Batch point-lookup verification harness with cold/hot timing"""

__version__ = "0.1.0"
