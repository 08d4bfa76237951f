"""
Pneuma - Contract interface and wire layer for Invocant.

Provides ABI types, the call-data codec, the interface registry and the
JSON-RPC transport used to talk to deployed contracts.

Uses httpx + eth-abi + eth-hash instead of the heavyweight web3.py.
"""
