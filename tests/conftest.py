"""
Pytest configuration for the lazy sequence tests.

Puts the project root on the Python path so test files can import lazy,
utils and models, and provides instrumented sources.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest


class CountingSource:
    """Re-iterable source that records how many traversals and pulls happen"""

    def __init__(self, items):
        self.items = list(items)
        self.traversals = 0
        self.pulls = 0

    def __iter__(self):
        self.traversals += 1
        for item in self.items:
            self.pulls += 1
            yield item


class UnboundedCountingSource:
    """Natural numbers forever, counting every element handed out"""

    def __init__(self):
        self.pulls = 0

    def __iter__(self):
        n = 0
        while True:
            self.pulls += 1
            yield n
            n += 1


@pytest.fixture
def counting_source():
    return CountingSource(range(10))


@pytest.fixture
def unbounded_source():
    return UnboundedCountingSource()


@pytest.fixture
def one_shot_source():
    return iter([1, 2, 3])
