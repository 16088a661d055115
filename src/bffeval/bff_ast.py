# src/bffeval/bff_ast.py
"""Syntax tree produced by the .bff parser.

The evaluator never tokenizes or parses text itself. It consumes trees made of
the node classes below, either constructed directly or loaded from the
parser's JSON shape with :func:`from_dict` / :func:`load_parse_data`.
"""

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class SourcePosition:
    """0-based line and character."""
    line: int
    character: int


@dataclass(frozen=True)
class ParseSourceRange:
    start: SourcePosition
    end: SourcePosition


class ParseError(Exception):
    """A file failed to parse. Forwarded unchanged by the evaluator."""

    def __init__(self, message, uri=None, range=None):
        super().__init__(message)
        self.message = message
        self.uri = uri
        self.range = range


# Base classes
class Node:
    def __repr__(self):
        return f"{self.__class__.__name__}()"

    def __str__(self):
        return self.__repr__()

class Statement(Node): pass
class Expression(Node): pass

class ParseData(Node):
    def __init__(self, statements=None):
        self.statements = statements or []

    def __repr__(self):
        return f"ParseData(statements={len(self.statements)})"


# Expression Nodes
class StringLiteral(Expression):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"StringLiteral(value={self.value!r})"

class StringExpression(Expression):
    """String template: literal fragments mixed with ``EvaluatedVariable`` parts."""
    def __init__(self, parts, range):
        self.parts = parts
        self.range = range

    def __repr__(self):
        return f"StringExpression(parts={len(self.parts)})"

class BooleanLiteral(Expression):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"BooleanLiteral(value={self.value})"

class IntegerLiteral(Expression):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"IntegerLiteral(value={self.value})"

class EvaluatedVariable(Expression):
    """``.Name`` (scope='current') or ``^Name`` (scope='parent').

    ``name`` is itself an expression (``StringLiteral`` or
    ``StringExpression``) because variable names may be dynamic.
    """
    def __init__(self, name, scope, range):
        self.name = name
        self.scope = scope
        self.range = range

    def __repr__(self):
        return f"EvaluatedVariable(name={self.name}, scope={self.scope})"

class ArrayLiteral(Expression):
    def __init__(self, items, range):
        self.items = items; self.range = range

    def __repr__(self):
        return f"ArrayLiteral(items={len(self.items)})"

class StructLiteral(Expression):
    def __init__(self, statements, range):
        self.statements = statements; self.range = range

    def __repr__(self):
        return f"StructLiteral(statements={len(self.statements)})"

class Summand(Node):
    def __init__(self, operator, value):
        self.operator = operator  # '+' or '-'
        self.value = value

    def __repr__(self):
        return f"Summand(operator={self.operator!r}, value={self.value})"

class Sum(Expression):
    """``first`` followed by one or more signed summands."""
    def __init__(self, first, summands):
        self.first = first
        self.summands = summands

    @property
    def range(self):
        end = self.summands[-1].value.range.end if self.summands else self.first.range.end
        return ParseSourceRange(self.first.range.start, end)

    def __repr__(self):
        return f"Sum(first={self.first}, summands={len(self.summands)})"


# Statement Nodes
class VariableLhs(Node):
    def __init__(self, name, scope, range):
        self.name = name; self.scope = scope; self.range = range

    def __repr__(self):
        return f"VariableLhs(name={self.name}, scope={self.scope})"

class VariableDefinition(Statement):
    def __init__(self, lhs, rhs):
        self.lhs = lhs; self.rhs = rhs

    def __repr__(self):
        return f"VariableDefinition(lhs={self.lhs}, rhs={self.rhs})"

class BinaryOperator(Statement):
    """``.Name + rhs`` / ``.Name - rhs``."""
    def __init__(self, lhs, rhs, operator):
        self.lhs = lhs
        self.rhs = rhs
        self.operator = operator

    def __repr__(self):
        return f"BinaryOperator(lhs={self.lhs}, operator={self.operator!r})"

class BinaryOperatorOnUnnamed(Statement):
    """``+ rhs`` continuing the previous statement's variable."""
    def __init__(self, rhs, operator, range_start):
        self.rhs = rhs
        self.operator = operator
        self.range_start = range_start

    def __repr__(self):
        return f"BinaryOperatorOnUnnamed(operator={self.operator!r})"

class ScopedStatements(Statement):
    def __init__(self, statements):
        self.statements = statements

    def __repr__(self):
        return f"ScopedStatements(statements={len(self.statements)})"

class Using(Statement):
    def __init__(self, struct, range):
        self.struct = struct; self.range = range

    def __repr__(self):
        return f"Using(struct={self.struct})"

class LoopVariable(Node):
    def __init__(self, name, range):
        self.name = name; self.range = range

    def __repr__(self):
        return f"LoopVariable(name={self.name})"

class ForEach(Statement):
    def __init__(self, array_to_loop_over, loop_var, statements, range):
        self.array_to_loop_over = array_to_loop_over
        self.loop_var = loop_var
        self.statements = statements
        self.range = range

    def __repr__(self):
        return f"ForEach(loop_var={self.loop_var}, array={self.array_to_loop_over})"

class GenericFunction(Statement):
    """Functions such as ``Alias('name') { ... }`` that only scope their body."""
    def __init__(self, alias, statements, range):
        self.alias = alias
        self.statements = statements
        self.range = range

    def __repr__(self):
        return f"GenericFunction(alias={self.alias})"

class ErrorStatement(Statement):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"ErrorStatement(value={self.value})"

class PrintStatement(Statement):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"PrintStatement(value={self.value})"

class Settings(Statement):
    def __init__(self, statements):
        self.statements = statements

    def __repr__(self):
        return f"Settings(statements={len(self.statements)})"

class IfConditionBoolean(Node):
    def __init__(self, value, invert=False):
        self.value = value; self.invert = invert

    def __repr__(self):
        return f"IfConditionBoolean(value={self.value}, invert={self.invert})"

class ComparisonOperator(Node):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"ComparisonOperator({self.value!r})"

class IfConditionComparison(Node):
    def __init__(self, lhs, rhs, operator):
        self.lhs = lhs
        self.rhs = rhs
        self.operator = operator

    def __repr__(self):
        return f"IfConditionComparison(operator={self.operator})"

class IfConditionIn(Node):
    def __init__(self, lhs, rhs, invert=False):
        self.lhs = lhs
        self.rhs = rhs
        self.invert = invert

    def __repr__(self):
        return f"IfConditionIn(invert={self.invert})"

class If(Statement):
    def __init__(self, condition, statements, range):
        self.condition = condition
        self.statements = statements
        self.range = range

    def __repr__(self):
        return f"If(condition={self.condition})"

# Directives
class Include(Statement):
    def __init__(self, path):
        self.path = path  # StringLiteral

    def __repr__(self):
        return f"Include(path={self.path})"

class Once(Statement):
    pass

class IsSymbolDefined(Node):
    def __init__(self, symbol):
        self.symbol = symbol

    def __repr__(self):
        return f"IsSymbolDefined({self.symbol!r})"

class EnvVarExists(Node):
    pass

class FileExists(Node):
    def __init__(self, file_path):
        self.file_path = file_path  # StringLiteral

    def __repr__(self):
        return f"FileExists({self.file_path})"

class DirectiveConditionTerm(Node):
    def __init__(self, term, invert=False):
        self.term = term; self.invert = invert

    def __repr__(self):
        return f"DirectiveConditionTerm(term={self.term}, invert={self.invert})"

class DirectiveIf(Statement):
    """``#if`` / ``#else`` / ``#endif``.

    ``condition`` is a list of AND-groups that are OR'd together; each group
    is a list of ``DirectiveConditionTerm``.
    """
    def __init__(self, condition, if_statements, else_statements, range_start):
        self.condition = condition
        self.if_statements = if_statements
        self.else_statements = else_statements or []
        self.range_start = range_start

    def __repr__(self):
        return f"DirectiveIf(or_groups={len(self.condition)})"

class Symbol(Node):
    def __init__(self, value, range):
        self.value = value; self.range = range

    def __repr__(self):
        return f"Symbol({self.value!r})"

class Define(Statement):
    def __init__(self, symbol):
        self.symbol = symbol

    def __repr__(self):
        return f"Define(symbol={self.symbol})"

class Undefine(Statement):
    def __init__(self, symbol):
        self.symbol = symbol

    def __repr__(self):
        return f"Undefine(symbol={self.symbol})"

class ImportEnvVar(Statement):
    def __init__(self, symbol, range):
        self.symbol = symbol; self.range = range

    def __repr__(self):
        return f"ImportEnvVar(symbol={self.symbol})"


# === JSON loading ===

def _position(data):
    return SourcePosition(int(data['line']), int(data['character']))

def _range(data):
    return ParseSourceRange(_position(data['start']), _position(data['end']))

def _nodes(items):
    return [from_dict(item) for item in items or []]

def _symbol(data):
    return Symbol(data['value'], _range(data['range']))

def _string_part(part):
    return part if isinstance(part, str) else from_dict(part)

def _lhs(data):
    return VariableLhs(from_dict(data['name']), data['scope'], _range(data['range']))

def _if_condition(data):
    kind = data.get('type')
    if kind == 'boolean':
        return IfConditionBoolean(from_dict(data['value']), bool(data.get('invert', False)))
    if kind == 'comparison':
        operator = data['operator']
        return IfConditionComparison(
            from_dict(data['lhs']),
            from_dict(data['rhs']),
            ComparisonOperator(operator['value'], _range(operator['range'])),
        )
    if kind == 'in':
        return IfConditionIn(from_dict(data['lhs']), from_dict(data['rhs']), bool(data.get('invert', False)))
    raise ValueError(f"Unknown 'If' condition type {kind!r}")

def _directive_term(data):
    term = data['term']
    kind = term.get('type')
    if kind == 'isSymbolDefined':
        node = IsSymbolDefined(term['symbol'])
    elif kind == 'envVarExists':
        node = EnvVarExists()
    elif kind == 'fileExists':
        node = FileExists(from_dict(term['filePath']))
    else:
        raise ValueError(f"Unknown '#if' term type {kind!r}")
    return DirectiveConditionTerm(node, bool(data.get('invert', False)))

_BUILDERS = {
    'string': lambda d: StringLiteral(d['value'], _range(d['range'])),
    'stringExpression': lambda d: StringExpression([_string_part(p) for p in d['parts']], _range(d['range'])),
    'boolean': lambda d: BooleanLiteral(bool(d['value']), _range(d['range'])),
    'integer': lambda d: IntegerLiteral(int(d['value']), _range(d['range'])),
    'evaluatedVariable': lambda d: EvaluatedVariable(from_dict(d['name']), d['scope'], _range(d['range'])),
    'array': lambda d: ArrayLiteral(_nodes(d['value']), _range(d['range'])),
    'struct': lambda d: StructLiteral(_nodes(d['statements']), _range(d['range'])),
    'sum': lambda d: Sum(from_dict(d['first']), [Summand(s['operator'], from_dict(s['value'])) for s in d['summands']]),
    'variableDefinition': lambda d: VariableDefinition(_lhs(d['lhs']), from_dict(d['rhs'])),
    'binaryOperator': lambda d: BinaryOperator(_lhs(d['lhs']), from_dict(d['rhs']), d['operator']),
    'binaryOperatorOnUnnamed': lambda d: BinaryOperatorOnUnnamed(from_dict(d['rhs']), d['operator'], _position(d['rangeStart'])),
    'scopedStatements': lambda d: ScopedStatements(_nodes(d['statements'])),
    'using': lambda d: Using(from_dict(d['struct']), _range(d['range'])),
    'forEach': lambda d: ForEach(
        from_dict(d['arrayToLoopOver']),
        LoopVariable(from_dict(d['loopVar']['name']), _range(d['loopVar']['range'])),
        _nodes(d['statements']),
        _range(d['range']),
    ),
    'genericFunction': lambda d: GenericFunction(from_dict(d['alias']), _nodes(d['statements']), _range(d['range'])),
    'error': lambda d: ErrorStatement(from_dict(d['value']), _range(d['range'])),
    'print': lambda d: PrintStatement(from_dict(d['value']), _range(d['range'])),
    'settings': lambda d: Settings(_nodes(d['statements'])),
    'if': lambda d: If(_if_condition(d['condition']), _nodes(d['statements']), _range(d['range'])),
    'include': lambda d: Include(from_dict(d['path'])),
    'once': lambda d: Once(),
    'directiveIf': lambda d: DirectiveIf(
        [[_directive_term(t) for t in group] for group in d['condition']],
        _nodes(d.get('ifStatements')),
        _nodes(d.get('elseStatements')),
        _position(d['rangeStart']),
    ),
    'define': lambda d: Define(_symbol(d['symbol'])),
    'undefine': lambda d: Undefine(_symbol(d['symbol'])),
    'importEnvVar': lambda d: ImportEnvVar(_symbol(d['symbol']), _range(d['range'])),
}


def from_dict(data):
    """Build a node from the parser's JSON shape (``{"type": ..., ...}``)."""
    if not isinstance(data, dict):
        raise ValueError(f"Expected a node object, got {type(data).__name__}")
    kind = data.get('type')
    builder = _BUILDERS.get(kind)
    if builder is None:
        raise ValueError(f"Unknown node type {kind!r}")
    return builder(data)


def parse_data_from_dict(data):
    """Accepts either ``{"statements": [...]}`` or a bare statement list."""
    statements = data['statements'] if isinstance(data, dict) else data
    return ParseData(_nodes(statements))


def load_parse_data(text):
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid parse tree JSON: {e}") from e
    try:
        return parse_data_from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"Malformed parse tree: {e}") from e
