"""Word-level n-gram text generation sandbox.

Train bigram, trigram and tetragram models on a small corpus and generate
continuations with temperature sampling and fuzzy context matching.
"""

__version__ = "1.0.0"

from .distance import levenshtein
from .generation import AnimatedGeneration, Generator, ModelSet, prepare_tokens
from .models import Candidate, NGramModel, train_model
from .sampling import apply_temperature, sample_candidate
from .text_cleaning import normalize_text
from .tokenization import tokenize, tokens_to_text

__all__ = [
    "AnimatedGeneration",
    "Candidate",
    "Generator",
    "ModelSet",
    "NGramModel",
    "apply_temperature",
    "levenshtein",
    "normalize_text",
    "prepare_tokens",
    "sample_candidate",
    "tokenize",
    "tokens_to_text",
    "train_model",
]
