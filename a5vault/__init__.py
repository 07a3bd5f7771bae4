"""
A5Vault - the GSM A5/1 keystream generator.

Packages:
- core_crypto: the generator, keystream packing and known-answer vectors
- integration: step tracing and logging hooks
"""

__version__ = "1.0.0"
