# src/bffeval/evaluator/core.py
from .. import bff_ast
from ..bff_ast import ParseError
from ..environment import ScopeStack
from ..errors import DataAndMaybeError, EvaluationError, InternalEvaluationError
from ..config import config
from ..object import Integer, String
from ..platform_symbols import get_platform_define_symbol
from ..provenance import EvaluatedData, SourceRange, VariableDefinition
from ..resources import uri_dirname, uri_to_path
from .utils import debug_log, logger, new_summary
from .expressions import ExpressionEvaluatorMixin
from .statements import StatementEvaluatorMixin
from .directives import DirectiveEvaluatorMixin

# Built-in variables share this definition; it is never part of the output.
BUILTIN_DEFINITION = VariableDefinition(-1, SourceRange.create('', -1, -1, -1, -1))


class Evaluator(ExpressionEvaluatorMixin, StatementEvaluatorMixin, DirectiveEvaluatorMixin):
    """Evaluates a parsed .bff document.

    One ``evaluate`` call is one pass: it owns a fresh scope stack, define set,
    ``#once`` set and provenance log. The instance can be reused for another
    pass; the state of the last pass stays readable until then.
    """

    def __init__(self, file_system, parse_data_provider, platform_symbol=None):
        self.file_system = file_system
        self.parse_data_provider = parse_data_provider
        self.platform_symbol = platform_symbol or get_platform_define_symbol()
        self._reset('')

    def _reset(self, this_fbuild_uri):
        self.scope_stack = ScopeStack()
        self.data = EvaluatedData()
        self.defines = {self.platform_symbol}
        self.once_uris = set()
        self.include_depth = 0
        self.this_uri = this_fbuild_uri
        self.root_dir_uri = uri_dirname(this_fbuild_uri) if this_fbuild_uri else ''
        self.summary = new_summary()

    def _define_builtins(self):
        builtins = {
            '_WORKING_DIR_': String(uri_to_path(self.root_dir_uri)),
            '_CURRENT_BFF_DIR_': String(''),
            '_FASTBUILD_VERSION_STRING_': String(config.fastbuild_version_string),
            '_FASTBUILD_VERSION_': Integer(config.fastbuild_version),
        }
        for name, value in builtins.items():
            self.scope_stack.define_current(name, value, BUILTIN_DEFINITION)

    def evaluate(self, parse_data, this_fbuild_uri):
        """Run one pass. Returns ``DataAndMaybeError`` with the (partial) data."""
        self._reset(this_fbuild_uri)
        self._define_builtins()
        debug_log("evaluate", f"{this_fbuild_uri}: {len(parse_data.statements)} statements")

        error = None
        try:
            self.eval_statements(parse_data.statements)
        except (EvaluationError, ParseError) as e:
            error = e
        except Exception as e:
            # Anything else is a bug in the evaluator or one of its collaborators.
            error = InternalEvaluationError(self._dummy_range(), f"Unexpected {type(e).__name__}: {e}")
            error.__cause__ = e
            logger.debug("Unexpected exception while evaluating %s", this_fbuild_uri, exc_info=True)

        if error is not None:
            self.summary['errors'] += 1
            kind = "internal error" if getattr(error, 'is_internal', False) else "error"
            logger.debug("Evaluation of %s stopped with %s: %s", this_fbuild_uri, kind, error)

        debug_log("evaluate summary", {**self.summary, **self.data.summary()})
        return DataAndMaybeError(self.data, error)

    # === DISPATCH ===

    def eval_statement(self, node, previous=None):
        """Execute one statement and return the variable it targeted, if any."""
        node_type = type(node)

        if node_type == bff_ast.VariableDefinition:
            return self.eval_variable_definition(node)

        elif node_type == bff_ast.BinaryOperator:
            return self.eval_binary_operator(node)

        elif node_type == bff_ast.BinaryOperatorOnUnnamed:
            return self.eval_binary_operator_on_unnamed(node, previous)

        elif node_type == bff_ast.ScopedStatements:
            self.eval_scoped(node.statements)

        elif node_type == bff_ast.Using:
            self.eval_using(node)

        elif node_type == bff_ast.ForEach:
            self.eval_for_each(node)

        elif node_type == bff_ast.GenericFunction:
            self.eval_generic_function(node)

        elif node_type == bff_ast.ErrorStatement:
            self.eval_error_statement(node)

        elif node_type == bff_ast.PrintStatement:
            self.eval_print_statement(node)

        elif node_type == bff_ast.Settings:
            self.eval_scoped(node.statements)

        elif node_type == bff_ast.If:
            self.eval_if(node)

        elif node_type == bff_ast.Include:
            self.eval_include(node, previous)

        elif node_type == bff_ast.Once:
            self.eval_once()

        elif node_type == bff_ast.DirectiveIf:
            self.eval_directive_if(node, previous)

        elif node_type == bff_ast.Define:
            self.eval_define(node)

        elif node_type == bff_ast.Undefine:
            self.eval_undefine(node)

        elif node_type == bff_ast.ImportEnvVar:
            self.eval_import_env_var(node)

        else:
            raise InternalEvaluationError(self._dummy_range(), f"Unknown statement type '{node_type.__name__}' from statement {node!r}")

        return None

    # === HELPERS ===

    def _range(self, parse_range):
        return SourceRange.from_parse_range(self.this_uri, parse_range)

    def _dummy_range(self):
        return SourceRange.create(self.this_uri, 0, 0, 0, 0)

    def _note_depth(self):
        self.summary['max_scope_depth'] = max(self.summary['max_scope_depth'], self.scope_stack.depth)

    def root_variables(self):
        """Root-scope bindings after the last pass, built-ins excluded."""
        return {
            name: variable.value
            for name, variable in self.scope_stack.stack[0].items()
            if variable.definition is not BUILTIN_DEFINITION
        }


def evaluate(parse_data, this_fbuild_uri, file_system, parse_data_provider, platform_symbol=None):
    """Evaluate ``parse_data`` as the root document ``this_fbuild_uri``."""
    evaluator = Evaluator(file_system, parse_data_provider, platform_symbol)
    return evaluator.evaluate(parse_data, this_fbuild_uri)
