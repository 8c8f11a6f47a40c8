import json
import os

import pytest

DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


def data_path(name):
    return os.path.join(DATA_DIR, name)


@pytest.fixture
def sample1():
    with open(data_path("sample1.json")) as f:
        return json.load(f)


@pytest.fixture
def sample2():
    with open(data_path("sample2.json")) as f:
        return json.load(f)
