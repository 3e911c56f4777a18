"""Pattern compilation and matching.

Rules are compiled once into read-only matcher collections that the
scanner and detectors query for every directory.
"""

from stackmap.matching.compiler import CompiledRuleSet, PatternCompiler
from stackmap.matching.dependency import DependencyMatcher

__all__ = ["CompiledRuleSet", "DependencyMatcher", "PatternCompiler"]
