"""Shared test fixtures."""

import pytest

from rectcover.data import Field


L_SHAPE = [
    '@@.',
    '.@.',
    '...',
]

CORNERS = [
    '@....',
    '.....',
    '.....',
    '.....',
    '....@',
]

# Three marks twelve cells apart: no rectangle spanning two of them beats
# two single cells on weight-to-cost ratio.
SPREAD_ROW = ['@' + '.' * 12 + '@' + '.' * 12 + '@']


@pytest.fixture
def l_shape() -> Field:
    return Field.from_rows(L_SHAPE)


@pytest.fixture
def corners() -> Field:
    return Field.from_rows(CORNERS)


@pytest.fixture
def spread_row() -> Field:
    return Field.from_rows(SPREAD_ROW)


@pytest.fixture
def empty_4x4() -> Field:
    return Field.from_rows(['....'] * 4)
