"""Pytest coverage for the bffeval command line."""

import json

from click.testing import CliRunner

from bffeval.cli.main import cli


def _range(line=0, start=0, end=1):
    return {'start': {'line': line, 'character': start}, 'end': {'line': line, 'character': end}}


def _string(value):
    return {'type': 'string', 'value': value, 'range': _range()}


def _assign(name, rhs):
    return {
        'type': 'variableDefinition',
        'lhs': {'name': _string(name), 'scope': 'current', 'range': _range()},
        'rhs': rhs,
    }


def _read(name):
    return {'type': 'evaluatedVariable', 'name': _string(name), 'scope': 'current', 'range': _range(1, 4, 9)}


def _write_tree(path, statements):
    path.write_text(json.dumps({'statements': statements}), encoding='utf-8')
    return str(path)


def test_version():
    result = CliRunner().invoke(cli, ['--version'])
    assert result.exit_code == 0
    assert '0.1.0' in result.output


def test_evaluate_prints_values(tmp_path):
    tree = _write_tree(tmp_path / 'fbuild.bff.json', [
        _assign('Greeting', _string('hello')),
        _assign('Copy', _read('Greeting')),
    ])
    result = CliRunner().invoke(cli, ['evaluate', tree])
    assert result.exit_code == 0, result.output
    assert 'Greeting' in result.output
    assert 'hello' in result.output
    assert 'Evaluation succeeded' in result.output


def test_evaluate_follows_json_includes(tmp_path):
    _write_tree(tmp_path / 'common.bff.json', [_assign('FromInclude', _string('shared'))])
    tree = _write_tree(tmp_path / 'fbuild.bff.json', [
        {'type': 'include', 'path': _string('common.bff')},
    ])
    result = CliRunner().invoke(cli, ['evaluate', tree, '--show', 'all'])
    assert result.exit_code == 0, result.output
    assert 'FromInclude' in result.output
    assert 'Definitions' in result.output
    assert 'References' in result.output


def test_evaluate_reports_errors(tmp_path):
    tree = _write_tree(tmp_path / 'fbuild.bff.json', [_assign('Copy', _read('Missing'))])
    result = CliRunner().invoke(cli, ['evaluate', tree])
    assert result.exit_code == 1
    assert 'Missing' in result.output


def test_check(tmp_path):
    good = _write_tree(tmp_path / 'good.bff.json', [_assign('A', _string('a'))])
    bad = _write_tree(tmp_path / 'bad.bff.json', [{'type': 'undefine', 'symbol': {'value': 'NOPE', 'range': _range()}}])
    runner = CliRunner()

    result = runner.invoke(cli, ['check', good])
    assert result.exit_code == 0
    assert 'without errors' in result.output

    result = runner.invoke(cli, ['check', bad])
    assert result.exit_code == 1
    assert 'Cannot #undef undefined symbol' in result.output


def test_malformed_tree(tmp_path):
    tree = tmp_path / 'broken.json'
    tree.write_text('{', encoding='utf-8')
    result = CliRunner().invoke(cli, ['check', str(tree)])
    assert result.exit_code == 1
    assert 'Invalid parse tree JSON' in result.output
