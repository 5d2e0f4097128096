"""
Test settings: no text model, in-memory store, no rate limits
"""
import os

os.environ.pop("OPENAI_API_KEY", None)
os.environ["REDIS_URL"] = "memory://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import random
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def model_client():
    """A text model double; set generate.return_value or generate.side_effect"""
    client = MagicMock()
    client.generate.return_value = ""
    return client


@pytest.fixture
def rng():
    return random.Random(1234)
