"""Tests for the command-line entry point."""

import json

import pytest

from rectcover.cli import main

INPUT = """\
@@.
.@.
...

1
@....
.....
.....
.....
....@
"""


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / 'strawberries.txt'
    path.write_text(INPUT)
    return path


def test_report(tmp_path, input_file):
    out = tmp_path / 'out' / 'covering.txt'
    main([str(input_file), '-o', str(out), '--log-level', 'WARNING'])
    assert out.read_text() == (
        'Cardinality:1\n'
        'Cost:14\n'
        '===\n'
        'AA.\n'
        'AA.\n'
        '...\n'
        '\n'
        'Cardinality:1\n'
        'Cost:35\n'
        '=====\n'
        + 'AAAAA\n' * 5
        + '\n'
        'Total Cost: 49\n'
    )


def test_summary_json(tmp_path, input_file):
    out = tmp_path / 'covering.txt'
    summary = tmp_path / 'summary.json'
    main([str(input_file), '-o', str(out), '--summary-out', str(summary), '--log-level', 'WARNING'])
    meta = json.loads(summary.read_text())
    assert meta['total_cost'] == 49
    assert meta['params'] == {'overhead': 10}
    assert [f['max_rectangles'] for f in meta['fields']] == [None, 1]
    assert meta['fields'][1]['rectangles'][0]['right'] == 4


def test_max_rectangles_override(tmp_path, input_file):
    out = tmp_path / 'covering.txt'
    summary = tmp_path / 'summary.json'
    main([str(input_file), '-o', str(out), '--summary-out', str(summary),
          '--max-rectangles', '2', '--log-level', 'WARNING'])
    meta = json.loads(summary.read_text())
    # two single cells are cheaper than the 5x5 hull once the bound allows it
    assert [f['cost'] for f in meta['fields']] == [14, 22]
    assert out.read_text().endswith('Total Cost: 36\n')


def test_missing_input(tmp_path):
    with pytest.raises(SystemExit):
        main([str(tmp_path / 'nope.txt'), '-o', str(tmp_path / 'out.txt')])


def test_bad_input(tmp_path):
    path = tmp_path / 'bad.txt'
    path.write_text('@?\n')
    with pytest.raises(SystemExit):
        main([str(path), '-o', str(tmp_path / 'out.txt')])


@pytest.mark.parametrize('overhead', ['-1', '-5'])
def test_negative_overhead(tmp_path, overhead):
    path = tmp_path / 'one.txt'
    path.write_text('@\n')
    with pytest.raises(SystemExit):
        main([str(path), '-o', str(tmp_path / 'out.txt'), '--overhead', overhead])
