import os
import sys

import pytest


def pytest_configure():
    # Ensure `src/` is importable so `zerodb` resolves without an install
    root = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    src_path = os.path.join(root, "src")
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


# Low PBKDF2 cost keeps the encrypted-store tests fast
FAST_ITERATIONS = 1_000


@pytest.fixture
def fast_iterations() -> int:
    return FAST_ITERATIONS
