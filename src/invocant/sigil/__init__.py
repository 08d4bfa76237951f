"""
Sigil - Credential handling and transaction signing for Invocant.
"""
