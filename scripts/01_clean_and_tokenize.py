from __future__ import annotations

from ngram_sandbox.text_cleaning import normalize_text
from ngram_sandbox.tokenization import ngrams, tokenize, tokens_to_text


def main() -> None:
    raw = "  El  Gat està CONTENT.\nEl gos (i el gat) és feliç!  "
    cleaned = normalize_text(raw)
    tokens = tokenize(cleaned)

    print("RAW:", repr(raw))
    print("CLEANED:", cleaned)
    print("TOKENS:", tokens)
    print("TRIGRAMS:", ngrams(tokens, 3)[:10])
    print("REJOINED:", tokens_to_text(tokens))


if __name__ == "__main__":
    main()
