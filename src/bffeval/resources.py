# src/bffeval/resources.py
"""
Resource access for the evaluator.

Documents are identified by ``file://`` URI strings. This module provides the
URI helpers the evaluator needs to resolve ``#include`` and ``#if
file_exists(...)`` paths, the file-system implementations used for
existence checks and reading text, and a caching parsed-tree provider.
"""

import logging
import os
import posixpath
import threading
from typing import Callable, Dict, Optional
from urllib.parse import urlparse, urlunparse, quote, unquote
from urllib.request import url2pathname

from .bff_ast import ParseData, ParseError, load_parse_data

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  URI helpers
# ══════════════════════════════════════════════════════════════════════

def path_to_uri(path: str) -> str:
    """Absolute file-system path -> ``file://`` URI."""
    path = os.path.abspath(path)
    if os.sep != '/':
        path = '/' + path.replace(os.sep, '/').lstrip('/')
    return 'file://' + quote(path)


def uri_to_path(uri: str) -> str:
    """``file://`` URI -> file-system path."""
    return url2pathname(unquote(urlparse(uri).path))


def _with_path(uri: str, path: str) -> str:
    parsed = urlparse(uri)
    return urlunparse(parsed._replace(path=quote(path)))


def _uri_path(uri: str) -> str:
    return unquote(urlparse(uri).path) or '/'


def uri_dirname(uri: str) -> str:
    return _with_path(uri, posixpath.dirname(_uri_path(uri).rstrip('/')) or '/')


def is_absolute_path(path: str) -> bool:
    """True for POSIX absolute paths and Windows drive paths."""
    return path.startswith(('/', '\\')) or (len(path) > 2 and path[1] == ':' and path[2] in '/\\')


def resolve_uri(base_dir_uri: str, path: str) -> str:
    """Resolve ``path`` (relative or absolute, either slash style) against a directory URI."""
    path = path.replace('\\', '/')
    if is_absolute_path(path):
        if not path.startswith('/'):
            path = '/' + path
        return _with_path(base_dir_uri, posixpath.normpath(path))
    joined = posixpath.normpath(posixpath.join(_uri_path(base_dir_uri), path))
    return _with_path(base_dir_uri, joined)


def relative_dir(root_dir_uri: str, dir_uri: str) -> str:
    """Path of ``dir_uri`` relative to ``root_dir_uri``; '' when they are the same."""
    relative = posixpath.relpath(_uri_path(dir_uri), _uri_path(root_dir_uri))
    return '' if relative == '.' else relative


# ══════════════════════════════════════════════════════════════════════
#  File systems
# ══════════════════════════════════════════════════════════════════════

class DiskFileSystem:
    """Reads documents from the local disk."""

    def file_exists(self, uri: str) -> bool:
        return os.path.isfile(uri_to_path(uri))

    def read_text(self, uri: str) -> str:
        with open(uri_to_path(uri), 'r', encoding='utf-8') as f:
            return f.read()


class InMemoryFileSystem:
    """URI -> text mapping. Used for unsaved editor buffers and in tests."""

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files: Dict[str, str] = dict(files or {})

    def remove_file(self, uri: str) -> None:
        self.files.pop(uri, None)

    def file_exists(self, uri: str) -> bool:
        return uri in self.files

    def read_text(self, uri: str) -> str:
        try:
            return self.files[uri]
        except KeyError:
            raise FileNotFoundError(f"No such file: {uri}") from None


# ══════════════════════════════════════════════════════════════════════
#  Parsed-tree providers
# ══════════════════════════════════════════════════════════════════════

class ParseDataProvider:
    """Returns the parsed tree of a document, caching results per URI.

    ``parse`` is called as ``parse(text, uri)`` and must return ``ParseData``
    or raise ``ParseError``. Failures are not cached.
    """

    def __init__(self, file_system, parse: Callable[[str, str], ParseData]):
        self.file_system = file_system
        self.parse = parse
        self._cache: Dict[str, ParseData] = {}
        self._lock = threading.Lock()

    def get_parse_data(self, uri: str) -> ParseData:
        with self._lock:
            cached = self._cache.get(uri)
        if cached is not None:
            return cached

        text = self.read(uri)
        parse_data = self.parse(text, uri)
        with self._lock:
            self._cache[uri] = parse_data
        logger.debug("Parsed and cached %s", uri)
        return parse_data

    def read(self, uri: str) -> str:
        return self.file_system.read_text(uri)

    def invalidate(self, uri: str) -> None:
        with self._lock:
            self._cache.pop(uri, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def cached_uris(self):
        with self._lock:
            return list(self._cache.keys())


def _parse_json_tree(text: str, uri: str) -> ParseData:
    try:
        return load_parse_data(text)
    except ParseError as e:
        e.uri = uri
        raise


class JsonParseDataProvider(ParseDataProvider):
    """Reads parser output serialized as JSON.

    The tree for ``file:///a/b.bff`` is read from ``file:///a/b.bff.json``;
    URIs that already end in ``.json`` are read as-is.
    """

    def __init__(self, file_system=None, suffix: str = '.json'):
        super().__init__(file_system or DiskFileSystem(), _parse_json_tree)
        self.suffix = suffix

    def read(self, uri: str) -> str:
        tree_uri = uri if uri.endswith(self.suffix) else uri + self.suffix
        return self.file_system.read_text(tree_uri)


class StaticParseDataProvider:
    """Serves pre-built trees from a dict of URI -> ParseData."""

    def __init__(self, trees: Optional[Dict[str, ParseData]] = None):
        self.trees: Dict[str, ParseData] = dict(trees or {})

    def add(self, uri: str, parse_data: ParseData) -> None:
        self.trees[uri] = parse_data

    def get_parse_data(self, uri: str) -> ParseData:
        parse_data = self.trees.get(uri)
        if parse_data is None:
            raise FileNotFoundError(f"No such file: {uri}")
        if isinstance(parse_data, Exception):
            raise parse_data
        return parse_data
