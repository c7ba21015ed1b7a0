"""Analyses built on top of the preprocessor output."""

from .exclusion import ExclusionAnalyzer, ExclusionReport, build_type_graph

__all__ = ["ExclusionAnalyzer", "ExclusionReport", "build_type_graph"]
