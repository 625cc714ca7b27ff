#!/usr/bin/env python3
"""
Basic usage examples for lazyseq.
"""

import itertools
import logging

from lazyseq import iterable, Seq, SeqConfig


def example_transforms():
    """Example: filter and map without intermediate lists."""
    print("\n=== Transform Example ===")

    numbers = itertools.count(1)
    squares = iterable.map(numbers, lambda x: x * x)
    odd_squares = iterable.filter(squares, lambda x: x % 2 == 1)

    head, rest = iterable.consume(odd_squares, 5)
    print(f"First five odd squares: {head}")
    print(f"Next one: {iterable.first(rest)}")


def example_concat():
    """Example: chaining sources."""
    print("\n=== Concat Example ===")

    chained = iterable.concat([1, 2], iterable.single(3), iterable.empty(), range(4, 6))
    print(f"concat: {list(chained)}")

    nested = iterable.concat_nested([[1, 2], [[3]], []])
    print(f"concat_nested (one level): {list(nested)}")


def example_slice_and_reduce():
    """Example: list-compatible slicing and folding."""
    print("\n=== Slice / Reduce Example ===")

    data = list(range(10))
    print(f"slice(data, -3): {list(iterable.slice(data, -3))}")
    print(f"slice(data, 2, -5): {list(iterable.slice(data, 2, -5))}")
    print(f"sum via reduce: {iterable.reduce(data, lambda a, b: a + b, 0)}")


def example_one_shot():
    """Example: is_empty consumes from one-shot sources."""
    print("\n=== One-shot Source Example ===")

    def lines():
        yield "header"
        yield "row 1"
        yield "row 2"

    source = lines()
    print(f"is_empty: {iterable.is_empty(source)}")
    print(f"what is left: {list(source)}")

    # Peek safely by consuming explicitly and keeping the prefix
    head, rest = iterable.consume(lines(), 1)
    print(f"header: {head[0]}, rows: {list(rest)}")


def example_seq():
    """Example: fluent chaining."""
    print("\n=== Seq Example ===")

    words = Seq(["lazy", "sequences", "are", "composable", "and", "cheap"])
    long_words = words.filter(lambda w: len(w) > 4).map(str.upper)

    print(f"Long words: {long_words.collect()}")
    print(f"Walked again: {long_words.collect()}")
    print(f"Total letters: {words.map(len).reduce(lambda a, b: a + b, 0)}")
    print(f"Last two: {words.slice(-2).collect()}")


def main():
    """Run all examples."""
    logging.basicConfig(level=logging.INFO)

    # Report memory pressure often, for demonstration
    SeqConfig.set_defaults(memory_check_interval=1000, pressure_log_level="HIGH")

    example_transforms()
    example_concat()
    example_slice_and_reduce()
    example_one_shot()
    example_seq()

    print("\n=== All examples completed! ===")


if __name__ == "__main__":
    main()
