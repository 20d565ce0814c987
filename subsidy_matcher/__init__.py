"""Subsidy matcher - hybrid pre-scoring and AI refinement of funding programmes."""

__version__ = "0.5.1"
