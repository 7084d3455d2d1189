"""Compiler module for solbuild.

This module exports the Compiler class and its result models:
- Compiler: Incremental compile of a contracts tree for one network
- BuildResult: Aggregated run result
- UnitResult / UnitStatus: Per-unit outcome
"""

from __future__ import annotations

from solbuild_core.compiler.compiler import Compiler, contract_name_for
from solbuild_core.compiler.models import BuildResult, UnitResult, UnitStatus

__all__ = [
    "BuildResult",
    "Compiler",
    "UnitResult",
    "UnitStatus",
    "contract_name_for",
]
