"""
Tests for the backoff generator and animated generation.
"""

import sys
import unittest
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ngram_sandbox.datasets import BASIC_CORPUS
from ngram_sandbox.generation import (
    AnimatedGeneration,
    Generator,
    ModelSet,
    find_context_fragment,
    prepare_tokens,
)


class TestModelSet(unittest.TestCase):
    """Tests for training and swapping the three models."""

    def test_train(self):
        models = ModelSet.train(BASIC_CORPUS)
        self.assertEqual([models.model(k).order for k in (2, 3, 4)], [2, 3, 4])
        self.assertFalse(models.is_empty())
        with self.assertRaises(ValueError):
            models.model(5)

    def test_retrain_returns_new_set(self):
        models = ModelSet.train(BASIC_CORPUS)
        retrained = models.retrain("a b a c a b")
        self.assertIsNot(models, retrained)
        self.assertIn("gat", models.bigram.vocabulary())
        self.assertEqual(retrained.bigram.get_most_common_token(), "a")

    def test_empty(self):
        self.assertTrue(ModelSet.train("").is_empty())


class TestBackoff(unittest.TestCase):
    """Tests for the tetragram -> trigram -> bigram -> most common chain."""

    def setUp(self):
        self.models = ModelSet.train(BASIC_CORPUS)
        self.generator = Generator(self.models, temperature=0)

    def test_empty_seed_falls_through_to_most_common_token(self):
        generator = Generator(ModelSet.train("a b a c a b"), temperature=0.7)
        resolution = generator.resolve([], 4)
        self.assertEqual(resolution.order, 1)
        self.assertEqual(resolution.candidates[0].token, "a")
        self.assertEqual(resolution.candidates[0].count, 3)
        self.assertEqual(generator.next_token([], 4), "a")

    def test_short_seed_backs_off_one_order(self):
        resolution = self.generator.resolve(["gat"], 3)
        self.assertEqual(resolution.order, 2)
        self.assertEqual(resolution.context, ("gat",))

    def test_fuzzy_context_resolution(self):
        resolution = self.generator.resolve(prepare_tokens("el Gats"), 3)
        self.assertEqual(resolution.order, 3)
        self.assertEqual(resolution.context, ("el", "gat"))

    def test_unseen_trigram_backs_off_to_bigram(self):
        # "gat gos" is never observed but both tokens are in the vocabulary
        resolution = self.generator.resolve(["gat", "gos"], 3)
        self.assertEqual(resolution.order, 2)
        self.assertEqual(resolution.context, ("gos",))

    def test_unseen_tetragram_is_blended(self):
        resolution = self.generator.resolve(prepare_tokens("el gat corre"), 4)
        self.assertEqual(resolution.order, 4)
        self.assertFalse(resolution.lookup.is_exact)
        self.assertLessEqual(len(resolution.lookup.contexts), 3)
        self.assertAlmostEqual(sum(c.prob for c in resolution.candidates), 1.0)

    def test_tetragram_without_weighting_backs_off(self):
        generator = Generator(self.models, temperature=0, weighted_orders=())
        resolution = generator.resolve(prepare_tokens("el gat corre"), 4)
        # "gat corre" is unseen as a trigram too
        self.assertEqual(resolution.order, 2)
        self.assertEqual(resolution.context, ("corre",))

    def test_never_escalates(self):
        resolution = self.generator.resolve(prepare_tokens("el gat està content ."), 2)
        self.assertEqual(resolution.order, 2)

    def test_empty_models(self):
        generator = Generator(ModelSet.train(""))
        self.assertIsNone(generator.resolve(["el"], 4))
        self.assertIsNone(generator.next_token([], 2))
        self.assertEqual(generator.generate([], 4, 10), [])

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            self.generator.resolve([], 5)
        with self.assertRaises(ValueError):
            Generator(self.models, temperature=-0.1)


class TestGenerate(unittest.TestCase):
    """Tests for single and batch generation."""

    def setUp(self):
        self.models = ModelSet.train(BASIC_CORPUS)

    def test_greedy_generation(self):
        generator = Generator(self.models, temperature=0)
        self.assertEqual(
            generator.generate([], 2, 5),
            ["el", "gat", "està", "content", "."],
        )

    def test_greedy_trigram(self):
        generator = Generator(self.models, temperature=0)
        self.assertEqual(generator.next_token(["el", "gat"], 3), "està")

    def test_step_details(self):
        generator = Generator(self.models, temperature=1.0, rng=np.random.default_rng(1))
        step = generator.step(["el"], 2)
        self.assertIn(step.token, {"gat", "gos", "cotxe"})
        self.assertEqual(step.order, 2)
        self.assertEqual(step.context, ("el",))
        self.assertEqual([c.token for c in step.alternatives], ["gat", "gos", "cotxe"])
        self.assertAlmostEqual(sum(c.prob for c in step.alternatives), 1.0)

    def test_seeded_generation_is_reproducible(self):
        first = Generator(self.models, rng=np.random.default_rng(42)).generate([], 4, 20)
        second = Generator(self.models, rng=np.random.default_rng(42)).generate([], 4, 20)
        self.assertEqual(len(first), 20)
        self.assertEqual(first, second)

    def test_generated_tokens_come_from_vocabulary(self):
        vocab = set(self.models.bigram.vocabulary())
        generator = Generator(self.models, temperature=1.5, rng=np.random.default_rng(5))
        for order in (2, 3, 4):
            for token in generator.generate(prepare_tokens("la gata"), order, 15):
                self.assertIn(token, vocab)

    def test_swap_models(self):
        generator = Generator(self.models, temperature=0)
        generator.swap_models(self.models.retrain("a b a c a b"))
        self.assertEqual(generator.next_token([], 2), "a")


class TestAnimatedGeneration(unittest.TestCase):
    """Tests for timer-driven generation."""

    def setUp(self):
        self.generator = Generator(ModelSet.train(BASIC_CORPUS), temperature=0)
        self.sleeps = []

    def test_run_with_limit(self):
        animation = AnimatedGeneration(self.generator, ["el"], 2, interval=0.2)
        produced = animation.run(max_tokens=3, sleep=self.sleeps.append)
        self.assertEqual(produced, ["gat", "està", "content"])
        self.assertEqual(self.sleeps, [0.2, 0.2, 0.2])
        self.assertEqual(animation.generated, produced)

    def test_stop_at_token_boundary(self):
        animation = AnimatedGeneration(self.generator, [], 2, interval=0.1)

        def on_token(token):
            if len(animation.generated) == 2:
                animation.stop()

        produced = animation.run(sleep=self.sleeps.append, on_token=on_token)
        self.assertEqual(produced, ["el", "gat"])
        self.assertFalse(animation.running)
        self.assertEqual(len(self.sleeps), 1)

    def test_stop_is_idempotent(self):
        animation = AnimatedGeneration(self.generator, [], 2)
        animation.stop()
        animation.stop()
        self.assertFalse(animation.running)
        self.assertIsNone(animation.tick())
        self.assertEqual(animation.generated, [])

    def test_stops_when_generation_cannot_continue(self):
        animation = AnimatedGeneration(Generator(ModelSet.train("")), [], 4)
        self.assertIsNone(animation.tick())
        self.assertFalse(animation.running)
        self.assertEqual(animation.run(max_tokens=5, sleep=self.sleeps.append), [])


class TestContextFragment(unittest.TestCase):
    """Tests for locating a context in the corpus."""

    def setUp(self):
        self.tokens = prepare_tokens(BASIC_CORPUS)

    def test_fragment_window(self):
        fragment = find_context_fragment(self.tokens, ["el", "gos"], window=2)
        self.assertEqual(fragment.tokens, ["content", ".", "el", "gos", "és", "feliç"])
        self.assertEqual(fragment.context_start, 2)
        self.assertEqual(fragment.context_end, 3)
        self.assertEqual(fragment.next_index, 4)

    def test_context_at_end(self):
        fragment = find_context_fragment(self.tokens, ["lluny", "."], window=1)
        self.assertEqual(fragment.tokens, ["va", "lluny", "."])
        self.assertIsNone(fragment.next_index)

    def test_missing(self):
        self.assertIsNone(find_context_fragment(self.tokens, ["la", "lluna"]))
        self.assertIsNone(find_context_fragment(self.tokens, []))


if __name__ == "__main__":
    unittest.main()
