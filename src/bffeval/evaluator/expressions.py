# src/bffeval/evaluator/expressions.py
from ..bff_ast import (
    ArrayLiteral, BooleanLiteral, EvaluatedVariable, IntegerLiteral, ParseSourceRange,
    StringExpression, StringLiteral, StructLiteral, Sum,
)
from ..environment import CURRENT, PARENT
from ..errors import EvaluationError, InternalEvaluationError
from ..object import (
    Array, Boolean, Integer, String, Struct, StructMember, deep_copy_value, type_name_a,
)
from ..provenance import SourceRange
from .operators import OPERATORS
from .utils import debug_log


class EvaluatedRValue:
    """A value together with the parse range it came from."""

    def __init__(self, value, range):
        self.value = value
        self.range = range

    def __repr__(self):
        return f"EvaluatedRValue(value={self.value!r})"


class ExpressionEvaluatorMixin:
    """Turns expression nodes into values, recording provenance as it goes."""

    def eval_rvalue(self, node):
        node_type = type(node)

        if node_type == StringLiteral:
            return EvaluatedRValue(String(node.value), node.range)

        elif node_type == StringExpression:
            return EvaluatedRValue(self.eval_string_expression(node.parts), node.range)

        elif node_type == StructLiteral:
            return self.eval_struct(node)

        elif node_type == Sum:
            return self.eval_sum(node)

        elif node_type == EvaluatedVariable:
            variable = self.eval_evaluated_variable(node)
            return EvaluatedRValue(variable.value, node.range)

        elif node_type == ArrayLiteral:
            return self.eval_array(node)

        elif node_type == BooleanLiteral:
            return EvaluatedRValue(Boolean(node.value), node.range)

        elif node_type == IntegerLiteral:
            return EvaluatedRValue(Integer(node.value), node.range)

        raise InternalEvaluationError(self._dummy_range(), f"Unsupported rValue {node!r}")

    # === VARIABLES ===

    def eval_name(self, name_node, range, error_cls=EvaluationError):
        """Evaluate a (possibly dynamic) variable name to a Python str."""
        evaluated = self.eval_rvalue(name_node)
        if not isinstance(evaluated.value, String):
            raise error_cls(range, f"Variable name must evaluate to a String, but instead evaluates to {type_name_a(evaluated.value)}")
        return evaluated.value.value

    def eval_evaluated_variable(self, node):
        """Resolve ``.Name`` / ``^Name`` and record the read.

        Returns the ``ScopeVariable`` that was read.
        """
        range = self._range(node.range)
        name = self.eval_name(node.name, range, InternalEvaluationError)

        if node.scope == CURRENT:
            variable = self.scope_stack.lookup(name, range)
        elif node.scope == PARENT:
            variable = self.scope_stack.lookup_from_parent(name, range)
        else:
            raise InternalEvaluationError(range, f"Unknown scope '{node.scope}' for variable \"{name}\"")

        self.data.add_evaluated_variable(variable.value, range)
        self.data.add_reference(variable.definition, range, variable.using_range)
        return variable

    # === STRINGS ===

    def eval_string_expression(self, parts):
        pieces = []
        for part in parts:
            if isinstance(part, str):
                pieces.append(part)
                continue
            if type(part) != EvaluatedVariable:
                raise InternalEvaluationError(self._dummy_range(), f"Unsupported string template part {part!r}")
            variable = self.eval_evaluated_variable(part)
            value = variable.value
            if isinstance(value, (Array, Struct)):
                raise EvaluationError(
                    self._range(part.range),
                    f"Cannot embed {type_name_a(value)} in a string template. Only a String, an Integer or a Boolean can be embedded.",
                )
            pieces.append(value.inspect())
        return String("".join(pieces))

    # === ARRAYS & STRUCTS ===

    def eval_array(self, node):
        elements = []
        for item in node.items:
            evaluated = self.eval_rvalue(item)
            # Arrays of arrays flatten one level: { .A, .B } concatenates.
            if isinstance(evaluated.value, Array):
                elements.extend(evaluated.value.elements)
            else:
                elements.append(evaluated.value)
        return EvaluatedRValue(Array(elements), node.range)

    def eval_struct(self, node):
        debug_log("eval_struct", f"{len(node.statements)} statements")
        with self.scope_stack.scope() as scope:
            self._note_depth()
            self.eval_statements(node.statements)
            members = {
                name: StructMember(variable.value, variable.definition)
                for name, variable in scope.items()
            }
        return EvaluatedRValue(Struct(members), node.range)

    # === SUMS ===

    def eval_sum(self, node):
        if not node.summands:
            raise InternalEvaluationError(self._dummy_range(), "A sum must have at least 2 values to add")

        first = self.eval_rvalue(node.first)
        # The first operand is copied so that adding to it does not change the
        # variable (or evaluated-variable record) it was read from.
        value = deep_copy_value(first.value)

        previous_range = first.range
        for summand in node.summands:
            operator = OPERATORS.get(summand.operator)
            if operator is None:
                raise InternalEvaluationError(self._dummy_range(), f"Unknown sum operator '{summand.operator}'")
            evaluated = self.eval_rvalue(summand.value)
            operator_range = SourceRange.from_positions(self.this_uri, previous_range.start, evaluated.range.end)
            value = operator(value, evaluated.value, operator_range)
            previous_range = evaluated.range

        return EvaluatedRValue(value, ParseSourceRange(first.range.start, previous_range.end))
