# src/bffeval/evaluator/directives.py
"""Preprocessor directives: #include, #once, #if, #define, #undef, #import."""

from ..bff_ast import EnvVarExists, FileExists, IsSymbolDefined, ParseError
from ..config import config
from ..errors import EvaluationError, InternalEvaluationError
from ..object import String
from ..provenance import SourceRange
from ..resources import relative_dir, resolve_uri, uri_dirname
from .utils import debug_log

CURRENT_BFF_DIR = '_CURRENT_BFF_DIR_'


class DirectiveEvaluatorMixin:

    # === #include / #once ===

    def eval_include(self, node, previous):
        include_uri = resolve_uri(uri_dirname(self.this_uri), node.path.value)
        if include_uri in self.once_uris:
            debug_log("eval_include", f"skipping #once file {include_uri}")
            self.summary['skipped_once_includes'] += 1
            return

        if self.include_depth >= config.max_include_depth:
            raise EvaluationError(
                self._range(node.path.range),
                f"Too many nested includes (more than {config.max_include_depth}) while including {include_uri}. Is there an #include cycle without #once?",
            )

        debug_log("eval_include", include_uri)
        try:
            include_parse_data = self.parse_data_provider.get_parse_data(include_uri)
        except ParseError:
            raise
        except Exception as e:
            raise EvaluationError(self._range(node.path.range), f"Unable to open include: {e}") from e
        self.summary['includes'] += 1

        # `_CURRENT_BFF_DIR_` is the included file's directory, relative to the
        # root file's directory, for the duration of the include.
        current_dir_variable = self.scope_stack.lookup(CURRENT_BFF_DIR, self._dummy_range())
        current_dir_before = current_dir_variable.value
        current_dir_variable.value = String(relative_dir(self.root_dir_uri, uri_dirname(include_uri)))

        including_uri = self.this_uri
        self.this_uri = include_uri
        self.include_depth += 1
        try:
            self.eval_statements(include_parse_data.statements, previous)
        finally:
            self.include_depth -= 1
            self.this_uri = including_uri
            current_dir_variable.value = current_dir_before

    def eval_once(self):
        self.once_uris.add(self.this_uri)

    # === #if ===

    def eval_directive_if(self, node, previous):
        # Condition: AND-groups OR'd together.
        result = False
        for and_group in node.condition:
            if all(self._eval_directive_term(term_or_not, node) for term_or_not in and_group):
                result = True
                break

        debug_log("eval_directive_if", result)
        statements = node.if_statements if result else node.else_statements
        return self.eval_statements(statements, previous)

    def _eval_directive_term(self, term_or_not, node):
        term = term_or_not.term
        term_type = type(term)
        if term_type == IsSymbolDefined:
            value = term.symbol in self.defines
        elif term_type == EnvVarExists:
            # The environment FASTBuild will run in is unknown, so exists(...) is false.
            value = False
        elif term_type == FileExists:
            file_uri = resolve_uri(uri_dirname(self.this_uri), term.file_path.value)
            try:
                value = bool(self.file_system.file_exists(file_uri))
            except Exception as e:
                raise EvaluationError(self._range(term.file_path.range), f"Unable to check whether file exists: {e}") from e
        else:
            start = node.range_start
            range = SourceRange.create(self.this_uri, start.line, start.character, start.line, start.character)
            raise InternalEvaluationError(range, f"Unknown '#if' term type from term '{term!r}'")
        return (not value) if term_or_not.invert else value

    # === #define / #undef / #import ===

    def eval_define(self, node):
        symbol = node.symbol.value
        if symbol in self.defines:
            raise EvaluationError(self._range(node.symbol.range), f'Cannot #define already defined symbol "{symbol}".')
        self.defines.add(symbol)

    def eval_undefine(self, node):
        symbol = node.symbol.value
        range = self._range(node.symbol.range)
        if symbol == self.platform_symbol:
            raise EvaluationError(range, f'Cannot #undef built-in symbol "{symbol}".')
        if symbol not in self.defines:
            raise EvaluationError(range, f'Cannot #undef undefined symbol "{symbol}".')
        self.defines.discard(symbol)

    def eval_import_env_var(self, node):
        # The real environment is unknown, so bind a placeholder instead.
        symbol = node.symbol.value
        value = String(config.env_var_placeholder.format(symbol=symbol))
        variable, created = self.scope_stack.set_current(symbol, value, self._range(node.range))
        if created:
            self.data.add_definition(variable.definition)
