"""Pytest coverage for URI helpers, file systems and parse data providers."""

import json

import pytest

from bffeval.bff_ast import ParseData, ParseError
from bffeval.resources import (
    DiskFileSystem, InMemoryFileSystem, JsonParseDataProvider, ParseDataProvider,
    StaticParseDataProvider, path_to_uri, relative_dir, resolve_uri, uri_dirname, uri_to_path,
)


@pytest.mark.parametrize("base, path, expected", [
    ('file:///project', 'a.bff', 'file:///project/a.bff'),
    ('file:///project', 'sub/../b.bff', 'file:///project/b.bff'),
    ('file:///project/sub', '..\\c.bff', 'file:///project/c.bff'),
    ('file:///project', '/abs/d.bff', 'file:///abs/d.bff'),
    ('file:///project', 'with space.bff', 'file:///project/with%20space.bff'),
])
def test_resolve_uri(base, path, expected):
    assert resolve_uri(base, path) == expected


def test_uri_dirname():
    assert uri_dirname('file:///project/sub/a.bff') == 'file:///project/sub'


@pytest.mark.parametrize("dir_uri, expected", [
    ('file:///project', ''),
    ('file:///project/sub', 'sub'),
    ('file:///project/sub/deeper', 'sub/deeper'),
    ('file:///other', '../other'),
])
def test_relative_dir(dir_uri, expected):
    assert relative_dir('file:///project', dir_uri) == expected


def test_path_uri_round_trip(tmp_path):
    path = str(tmp_path / 'fbuild.bff')
    assert uri_to_path(path_to_uri(path)) == path


class TestFileSystems:
    def test_in_memory(self):
        fs = InMemoryFileSystem({'file:///a.bff': 'text'})
        assert fs.file_exists('file:///a.bff')
        assert fs.read_text('file:///a.bff') == 'text'
        fs.remove_file('file:///a.bff')
        with pytest.raises(FileNotFoundError):
            fs.read_text('file:///a.bff')

    def test_disk(self, tmp_path):
        target = tmp_path / 'x.bff'
        target.write_text('hello', encoding='utf-8')
        fs = DiskFileSystem()
        assert fs.file_exists(path_to_uri(str(target)))
        assert not fs.file_exists(path_to_uri(str(tmp_path / 'missing.bff')))
        assert fs.read_text(path_to_uri(str(target))) == 'hello'


class TestProviders:
    def test_parse_results_are_cached(self):
        calls = []

        def parse(text, uri):
            calls.append(uri)
            return ParseData([])

        provider = ParseDataProvider(InMemoryFileSystem({'file:///a.bff': ''}), parse)
        first = provider.get_parse_data('file:///a.bff')
        assert provider.get_parse_data('file:///a.bff') is first
        assert calls == ['file:///a.bff']
        assert provider.cached_uris() == ['file:///a.bff']

        provider.invalidate('file:///a.bff')
        provider.get_parse_data('file:///a.bff')
        assert len(calls) == 2

    def test_failures_are_not_cached(self):
        def parse(text, uri):
            raise ParseError('bad', uri=uri)

        provider = ParseDataProvider(InMemoryFileSystem({'file:///a.bff': ''}), parse)
        with pytest.raises(ParseError):
            provider.get_parse_data('file:///a.bff')
        assert provider.cached_uris() == []

    def test_json_provider_reads_sidecar_file(self):
        tree = {'statements': [{'type': 'once'}]}
        fs = InMemoryFileSystem({'file:///a.bff.json': json.dumps(tree)})
        provider = JsonParseDataProvider(fs)
        assert len(provider.get_parse_data('file:///a.bff').statements) == 1

    def test_json_provider_tags_parse_errors_with_uri(self):
        fs = InMemoryFileSystem({'file:///a.bff.json': '{'})
        provider = JsonParseDataProvider(fs)
        with pytest.raises(ParseError) as excinfo:
            provider.get_parse_data('file:///a.bff')
        assert excinfo.value.uri == 'file:///a.bff'

    def test_static_provider(self):
        tree = ParseData([])
        provider = StaticParseDataProvider({'file:///a.bff': tree})
        assert provider.get_parse_data('file:///a.bff') is tree
        with pytest.raises(FileNotFoundError):
            provider.get_parse_data('file:///b.bff')
