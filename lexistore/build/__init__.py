"""Store build: attribute derivation, probability ranking, definitions, pipeline."""

from .attributes import (
    AttributeDeriver,
    alphagram,
    count_anagrams,
    derive_attributes,
    resolve_lexicon_styles,
)
from .definitions import (
    DefinitionResolver,
    filter_definitions,
    load_definitions,
    resolve_definitions,
)
from .pipeline import (
    BuildConfigurationError,
    BuildError,
    BuildPipeline,
    estimate_steps,
    run_build,
)
from .progress import BuildProgress, CancellationToken
from .ranking import rank_length_class, rank_probabilities

__all__ = [
    # Attributes
    "AttributeDeriver",
    "alphagram",
    "count_anagrams",
    "derive_attributes",
    "resolve_lexicon_styles",
    # Definitions
    "DefinitionResolver",
    "filter_definitions",
    "load_definitions",
    "resolve_definitions",
    # Pipeline
    "BuildConfigurationError",
    "BuildError",
    "BuildPipeline",
    "estimate_steps",
    "run_build",
    # Progress
    "BuildProgress",
    "CancellationToken",
    # Ranking
    "rank_length_class",
    "rank_probabilities",
]
