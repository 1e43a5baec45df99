"""Property path parsing, matching and resolution."""

from .expression import ROOT, PropertyPath, Step, StepKind, format_steps, parse_path
from .resolver import PathResolver

__all__ = [
    "PathResolver",
    "PropertyPath",
    "ROOT",
    "Step",
    "StepKind",
    "format_steps",
    "parse_path",
]
