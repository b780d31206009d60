"""Record normalization and example collection.

Exports:
    normalize: Normalize one record of any known shape (or return None).
    normalize_all: Normalize a bulk source, dropping rejected records.
    commit: Re-normalize an edited entry with a fresh timestamp.
    new_entry: Empty entry for a character.
    tokenize_readings: Split a compact reading string.
    parse_example: Parse a free-text example string.
    collect_examples: Collect unique examples from a record.
    ExampleSet: Ordered uniqueness container for examples.
"""

from .examples import ExampleSet, coerce_example, collect_examples, parse_example
from .normalizer import (
    commit, new_entry, normalize, normalize_all, tokenize_readings,
)

__all__ = [
    'normalize', 'normalize_all', 'commit', 'new_entry', 'tokenize_readings',
    'parse_example', 'coerce_example', 'collect_examples', 'ExampleSet',
]
