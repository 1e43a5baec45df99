"""Generation engine: per-sample state, seeded random streams and the sampler."""

from .context import GenerationContext
from .nodes import GenerationNode
from .sampler import Sampler
from .seed import SampleSequence, rng_for

__all__ = ["GenerationContext", "GenerationNode", "SampleSequence", "Sampler", "rng_for"]
