"""Privacy Vault - separated identity, clinical and audit storage."""

__version__ = "1.0.0"
