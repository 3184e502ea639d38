import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import diary_crypto  # noqa: E402


@pytest.fixture(scope="session")
def keypair():
    # RSA generation dominates test time; share one pair per session
    return diary_crypto.generate_keypair()


@pytest.fixture(scope="session")
def other_keypair():
    return diary_crypto.generate_keypair()
