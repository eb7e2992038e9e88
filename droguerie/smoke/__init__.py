"""
Storefront Flow Test Module
"""
from .flow_tester import FlowTester, run_smoke_test
from .scorecard import CheckResult, Scorecard, Section, Verdict

__all__ = [
    "FlowTester",
    "run_smoke_test",
    "Scorecard",
    "CheckResult",
    "Section",
    "Verdict",
]
