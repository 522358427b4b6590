"""CLI layer: user interaction, phase reporting and the error boundary.

This package is the outermost layer of the toolkit.  It may import
from ``core`` and ``infra``, but no other layer may import from ``cli``.
"""
