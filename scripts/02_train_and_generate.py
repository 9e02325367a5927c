from __future__ import annotations

import numpy as np

from ngram_sandbox.datasets import EXTENDED_CORPUS
from ngram_sandbox.generation import Generator, ModelSet, prepare_tokens
from ngram_sandbox.tokenization import tokens_to_text


def main() -> None:
    models = ModelSet.train(EXTENDED_CORPUS)
    print(models.tetragram.to_frame().head(10).to_string(index=False))

    seed = prepare_tokens("la nena")
    for temperature in (0.0, 0.7, 1.5):
        generator = Generator(models, temperature=temperature, rng=np.random.default_rng(7))
        out = generator.generate(seed, order=4, count=20)
        print(f"T={temperature}:", tokens_to_text(seed + out))

    # unseen tetragram context: blended from the nearest observed ones
    lookup = models.tetragram.get_weighted_candidates_for_context(("el", "sol", "cau"), limit=3)
    for near in lookup.contexts:
        print("near:", " ".join(near.context), near.distance)
    for candidate in lookup.candidates:
        print(f"  {candidate.token}: {candidate.prob:.3f}")


if __name__ == "__main__":
    main()
