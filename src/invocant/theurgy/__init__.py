"""
Theurgy - Command implementations for the Invocant CLI.

Each module groups related top-level commands:
- invoke: call (read-only query) and send (signed transaction)
- divine: methods (list an interface) and chain-id (endpoint identity)
"""
