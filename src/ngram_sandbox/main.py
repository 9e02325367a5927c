#!/usr/bin/env python3
"""
N-gram Sandbox

Command-line entry point. This script provides:
1. Demo mode
2. One-shot generation
3. N-gram table listing / CSV export
4. Interactive mode

Usage:
    ngram-sandbox --demo                                   # Run demonstration
    ngram-sandbox --generate 20 --order 3 --seed "el gat"  # Generate once
    ngram-sandbox --table 2 --out bigrams.csv              # Export bigrams
    ngram-sandbox --interactive                            # Interactive mode
"""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from .config import SandboxConfig, clamp_temperature
from .datasets import CORPUS_OPTIONS, get_corpus, load_corpus_csv, load_corpus_text
from .generation import AnimatedGeneration, Generator, ModelSet, find_context_fragment, prepare_tokens
from .models import SUPPORTED_ORDERS
from .sampling import apply_temperature
from .tokenization import tokens_to_text

logger = logging.getLogger(__name__)

ORDER_NAMES = {2: "bigram", 3: "trigram", 4: "tetragram"}


def build_generator(config: SandboxConfig, models: ModelSet) -> Generator:
    return Generator(
        models,
        temperature=config.temperature,
        closest_limit=config.closest_limit,
        weighted_orders=config.weighted_orders,
        rng=np.random.default_rng(config.seed),
    )


def run_demo(config: SandboxConfig, corpus: str) -> None:
    """
    Train on the corpus and generate a short continuation with every order.

    Args:
        config: Configuration object
        corpus: Training text
    """
    print("=" * 70)
    print("N-gram Sandbox - Demonstration Mode")
    print("=" * 70)

    models = ModelSet.train(corpus)
    generator = build_generator(config, models)
    count = config.batch_sizes[0] if config.batch_sizes else 10

    for order in SUPPORTED_ORDERS:
        print("\n" + "-" * 70)
        print(f"{ORDER_NAMES[order].capitalize()} model ({models.model(order).context_count()} contexts)")
        print("-" * 70)
        for seed in ["", "el gat", "la gata"]:
            seed_tokens = prepare_tokens(seed)
            generated = generator.generate(seed_tokens, order, count)
            print(f"Seed: {seed!r:12} -> {tokens_to_text(seed_tokens + generated)}")

    print("\n" + "=" * 70)
    print("Demo Complete")
    print("=" * 70)


def run_generate(config: SandboxConfig, corpus: str, seed: str, count: int) -> int:
    models = ModelSet.train(corpus)
    if models.is_empty():
        print("Corpus is empty, nothing to generate.")
        return 1
    generator = build_generator(config, models)
    seed_tokens = prepare_tokens(seed)
    generated = generator.generate(seed_tokens, config.order, count)
    print(tokens_to_text(seed_tokens + generated))
    return 0


def run_table(corpus: str, order: int, out: Optional[str], context: Optional[str]) -> int:
    model = ModelSet.train(corpus).model(order)
    frame = model.to_frame(prepare_tokens(context) if context else None)
    if out:
        frame.to_csv(out, index=False)
        print(f"Wrote {len(frame)} {ORDER_NAMES[order]}s to: {out}")
    else:
        print(frame.to_string(index=False))
    return 0


def _print_step_details(generator: Generator, tokens: List[str], order: int) -> None:
    resolution = generator.resolve(tokens, order)
    if resolution is None:
        print("No alternatives available.")
        return
    context = " ".join(resolution.context) or "(none)"
    print(f"Order used: {resolution.order}  Context: {context}")
    for near in resolution.lookup.contexts:
        if near.distance > 0:
            print(f"  near: {' '.join(near.context)} (distance {near.distance})")
    for candidate in apply_temperature(resolution.candidates, generator.temperature):
        bar = "#" * int(round(candidate.prob * 30))
        print(f"  {candidate.token:15} {candidate.prob * 100:5.1f}% {bar}")


def run_interactive(config: SandboxConfig, corpus: str) -> None:
    """
    Run interactive generation mode.

    Args:
        config: Configuration object
        corpus: Initial training text
    """
    print("=" * 70)
    print("N-gram Sandbox - Interactive Mode")
    print("=" * 70)
    print("\nCommands:")
    print("  /seed <text>     - Set the seed text (clears generated tokens)")
    print("  /order <2|3|4>   - Set model order")
    print("  /temp <value>    - Set temperature (0-2, 0 = greedy)")
    print("  /corpus <id>     - Select built-in corpus (basic, extended)")
    print("  /train <text>    - Train on custom text")
    print("  /next            - Generate one token")
    print("  /gen <n>         - Generate n tokens")
    print("  /play <n>        - Animated generation of n tokens")
    print("  /alts            - Show alternatives for the next token")
    print("  /info            - Show current settings")
    print("  /clear           - Reset seed, output and settings")
    print("  /quit            - Exit")
    print("-" * 70)

    models = ModelSet.train(corpus)
    generator = build_generator(config, models)
    order = config.order
    seed_tokens: List[str] = []
    generated: List[str] = []

    while True:
        try:
            user_input = input("\n> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            break

        if not user_input:
            continue

        command, _, arg = user_input.partition(" ")
        arg = arg.strip()

        if command == "/quit":
            print("Goodbye!")
            break

        if command == "/seed":
            seed_tokens = prepare_tokens(arg)
            generated = []
        elif command == "/order":
            if arg.isdigit() and int(arg) in SUPPORTED_ORDERS:
                order = int(arg)
                print(f"Order set to: {ORDER_NAMES[order]}")
            else:
                print("Invalid order. Use: 2, 3 or 4")
            continue
        elif command == "/temp":
            try:
                generator.temperature = clamp_temperature(float(arg))
            except ValueError:
                print("Invalid temperature")
                continue
            print(f"Temperature set to: {generator.temperature:.1f}")
            continue
        elif command == "/corpus":
            try:
                option = get_corpus(arg)
            except KeyError as e:
                print(e)
                continue
            if not option.text:
                print("Use /train <text> for a custom corpus")
                continue
            generator.swap_models(models.retrain(option.text))
            models = generator.models
            print(f"Trained on: {option.label}")
            continue
        elif command == "/train":
            generator.swap_models(models.retrain(arg))
            models = generator.models
            print(f"Trained on custom corpus ({len(models.bigram.vocabulary())} types)")
            continue
        elif command == "/next":
            token = generator.next_token(seed_tokens + generated, order)
            if token is None:
                print("Generation cannot continue.")
            else:
                generated.append(token)
        elif command == "/gen":
            count = int(arg) if arg.isdigit() else 10
            generated.extend(generator.generate(seed_tokens + generated, order, count))
        elif command == "/play":
            count = int(arg) if arg.isdigit() else 10
            animation = AnimatedGeneration(generator, seed_tokens + generated, order, config.animation_interval)
            try:
                animation.run(max_tokens=count, on_token=lambda t: print(t, end=" ", flush=True))
            except KeyboardInterrupt:
                animation.stop()
            print()
            generated.extend(animation.generated)
        elif command == "/alts":
            _print_step_details(generator, seed_tokens + generated, order)
            tokens = seed_tokens + generated
            size = order - 1
            if len(tokens) >= size:
                corpus_tokens = prepare_tokens(models.corpus)
                fragment = find_context_fragment(corpus_tokens, tokens[len(tokens) - size:])
                if fragment:
                    print(f"Seen in corpus: ...{tokens_to_text(fragment.tokens)}...")
            continue
        elif command == "/info":
            print(f"Order: {ORDER_NAMES[order]}  Temperature: {generator.temperature:.1f}")
            print(f"Vocabulary: {len(models.bigram.vocabulary())} types")
            continue
        elif command == "/clear":
            seed_tokens, generated = [], []
            order = config.order
            generator.temperature = config.temperature
        else:
            print(f"Unknown command: {command}")
            continue

        print(tokens_to_text(seed_tokens + generated))


def load_corpus(args, config: SandboxConfig) -> str:
    if args.corpus_file:
        return load_corpus_text(args.corpus_file)
    options = load_corpus_csv(args.corpus_csv) if args.corpus_csv else CORPUS_OPTIONS
    return get_corpus(args.corpus or config.corpus_id, options).text


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Interactive n-gram text generation sandbox")

    parser.add_argument("--demo", action="store_true", help="Run demonstration mode")
    parser.add_argument("--interactive", "-i", action="store_true", help="Run interactive mode")
    parser.add_argument("--generate", "-g", type=int, metavar="N", help="Generate N tokens and exit")
    parser.add_argument("--table", "-t", type=int, choices=SUPPORTED_ORDERS, help="List learned n-grams of this order")
    parser.add_argument("--context", type=str, help="Only list n-grams following this context (with --table)")
    parser.add_argument("--out", "-o", type=str, help="Write the --table listing to this CSV file")
    parser.add_argument("--order", type=int, choices=SUPPORTED_ORDERS, help="Model order for generation")
    parser.add_argument("--seed", "-s", type=str, default="", help="Seed text for generation")
    parser.add_argument("--temperature", type=float, help="Sampling temperature (0 = greedy)")
    parser.add_argument("--corpus", type=str, help="Built-in corpus id (basic, extended)")
    parser.add_argument("--corpus-file", type=str, help="Train on a plain text file")
    parser.add_argument("--corpus-csv", type=str, help="CSV of corpora with columns id,label,text")
    parser.add_argument("--config", "-c", type=str, help="Path to configuration JSON file")
    parser.add_argument("--rng-seed", type=int, help="Seed for the random source")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = SandboxConfig.from_json(args.config) if args.config else SandboxConfig()
        if args.order is not None:
            config.order = args.order
        if args.temperature is not None:
            if args.temperature < 0:
                raise ValueError(f"temperature must be >= 0, got {args.temperature}")
            config.temperature = args.temperature
        if args.rng_seed is not None:
            config.seed = args.rng_seed
        corpus = load_corpus(args, config)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Could not start: {e}")
        return 2

    if args.interactive:
        run_interactive(config, corpus)
        return 0
    if args.generate is not None:
        return run_generate(config, corpus, args.seed, args.generate)
    if args.table is not None:
        return run_table(corpus, args.table, args.out, args.context)

    run_demo(config, corpus)
    return 0


if __name__ == "__main__":
    sys.exit(main())
