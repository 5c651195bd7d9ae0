"""
tfridge

Scan a directory of Terraform configuration for module and provider updates.
"""

__version__ = "0.0.1"

from .cli import main

__all__ = ["main"]
