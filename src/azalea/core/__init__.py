"""Azalea interpreter core: tokenizer, parser, values and evaluator."""
