"""Compiler backends for solbuild.

This module exports the backend interface and the native solc backend:
- CompilerBackend: Abstract backend
- BackendOutput / CompiledContract: Backend result models
- SolcExecutableBackend: solc binary driven via --standard-json
"""

from __future__ import annotations

from solbuild_core.backends.base import BackendOutput, CompiledContract, CompilerBackend
from solbuild_core.backends.solc import SolcExecutableBackend

__all__ = [
    "BackendOutput",
    "CompiledContract",
    "CompilerBackend",
    "SolcExecutableBackend",
]
