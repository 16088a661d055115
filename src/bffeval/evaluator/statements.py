# src/bffeval/evaluator/statements.py
from ..bff_ast import (
    EvaluatedVariable, IfConditionBoolean, IfConditionComparison, IfConditionIn,
)
from ..environment import CURRENT, PARENT
from ..errors import EvaluationError, InternalEvaluationError
from ..object import Array, Boolean, String, Struct, deep_copy_value, type_name, type_name_a
from ..provenance import SourceRange
from .operators import OPERATORS
from .utils import debug_log

_ORDERING = {
    '<': lambda a, b: a < b,
    '<=': lambda a, b: a <= b,
    '>': lambda a, b: a > b,
    '>=': lambda a, b: a >= b,
}


class StatementEvaluatorMixin:
    """Handles assignment, in-place operators, scoping and control flow."""

    def eval_statements(self, statements, previous=None):
        """Run a statement list top to bottom.

        ``previous`` is the variable targeted by the last named statement; an
        unnamed ``+``/``-`` continues it.
        """
        for statement in statements:
            previous = self.eval_statement(statement, previous)
            self.summary['evaluated_statements'] += 1
        return previous

    def eval_scoped(self, statements):
        with self.scope_stack.scope():
            self._note_depth()
            self.eval_statements(statements)

    # === VARIABLES ===

    def eval_variable_definition(self, node):
        rhs = self.eval_rvalue(node.rhs)

        lhs = node.lhs
        lhs_range = self._range(lhs.range)
        name = self.eval_name(lhs.name, lhs_range)
        debug_log("eval_variable_definition", f"{'.' if lhs.scope == CURRENT else '^'}{name}")

        # Copy so that later modifications do not change the RHS value.
        value = deep_copy_value(rhs.value)
        if lhs.scope == CURRENT:
            variable, created = self.scope_stack.set_current(name, value, lhs_range)
            if created:
                self.data.add_definition(variable.definition)
        elif lhs.scope == PARENT:
            variable = self.scope_stack.update_parent(name, value, lhs_range)
        else:
            raise InternalEvaluationError(lhs_range, f"Unknown scope '{lhs.scope}'")

        self.data.add_reference(variable.definition, lhs_range, variable.using_range)
        return variable

    def eval_binary_operator(self, node):
        lhs = node.lhs
        lhs_range = self._range(lhs.range)
        name = self.eval_name(lhs.name, lhs_range)
        debug_log("eval_binary_operator", f"{name} {node.operator}")

        scope_stack = self.scope_stack
        outer = None
        if lhs.scope == CURRENT and scope_stack.find_current(name) is None:
            outer = scope_stack.find(name)

        if outer is not None:
            # Modifying a variable that only exists in an enclosing scope defines
            # it in the current scope, seeded with the enclosing value.
            definition = scope_stack.create_definition(lhs_range, name)
            self.data.add_definition(definition)
            variable = scope_stack.define_current(name, outer.value, definition)
        else:
            variable = scope_stack.lookup_in(lhs.scope, name, lhs_range)
        previous_value = variable.value

        rhs = self.eval_rvalue(node.rhs)
        operator_range = SourceRange.from_positions(self.this_uri, lhs.range.start, rhs.range.end)
        variable.value = self._apply_operator(node.operator, previous_value, rhs.value, operator_range)

        # The LHS is both a read (of the previous value) and a reference.
        self.data.add_evaluated_variable(previous_value, lhs_range)
        self.data.add_reference(variable.definition, lhs_range, variable.using_range)
        return variable

    def eval_binary_operator_on_unnamed(self, node, previous):
        if previous is None:
            range = SourceRange.from_positions(self.this_uri, node.range_start, node.range_start)
            raise EvaluationError(range, "Unnamed modification must follow a variable assignment in the same scope.")

        rhs = self.eval_rvalue(node.rhs)
        operator_range = SourceRange.from_positions(self.this_uri, node.range_start, rhs.range.end)
        previous.value = self._apply_operator(node.operator, previous.value, rhs.value, operator_range)
        # Unnamed operators chain.
        return previous

    def _apply_operator(self, operator, existing, operand, range):
        func = OPERATORS.get(operator)
        if func is None:
            raise InternalEvaluationError(range, f"Unknown operator '{operator}'")
        # Operate on a copy: the existing value may already be recorded as an
        # evaluated variable or shared with another binding.
        return func(deep_copy_value(existing), operand, range)

    # === USING ===

    def eval_using(self, node):
        statement_range = self._range(node.range)
        if type(node.struct) != EvaluatedVariable:
            raise EvaluationError(statement_range, f"'Using' parameter must be an evaluated variable, but instead is '{type(node.struct).__name__}'")

        struct_variable = self.eval_evaluated_variable(node.struct)
        struct = struct_variable.value
        if not isinstance(struct, Struct):
            raise EvaluationError(self._range(node.struct.range), f"'Using' parameter must be a Struct, but instead is {type_name_a(struct)}")

        scope_stack = self.scope_stack
        for member_name, member in struct.members.items():
            existing = scope_stack.find_current(member_name)
            if existing is not None:
                existing.value = member.value
                definition = existing.definition
            else:
                # The new binding borrows the member's definition identity.
                definition = member.definition
                scope_stack.define_current(member_name, member.value, definition, using_range=statement_range)

            # Link the binding, the Using statement and the member definition so
            # that references from either side find each other.
            self.data.add_reference(definition, statement_range)
            self.data.add_reference(member.definition, statement_range)
            self.data.add_reference(definition, member.definition.range)

    # === LOOPS & FUNCTIONS ===

    def eval_for_each(self, node):
        statement_range = self._range(node.range)
        if type(node.array_to_loop_over) != EvaluatedVariable:
            raise EvaluationError(statement_range, f"'ForEach' array to loop over must be an evaluated variable, but instead is '{type(node.array_to_loop_over).__name__}'")

        array_node = node.array_to_loop_over
        array_variable = self.eval_evaluated_variable(array_node)

        loop_var_range = self._range(node.loop_var.range)
        loop_var_name = self.eval_name(node.loop_var.name, loop_var_range)

        items = array_variable.value
        if not isinstance(items, Array):
            raise EvaluationError(self._range(array_node.range), f"'ForEach' variable to loop over must be an Array, but instead is {type_name_a(items)}")

        debug_log("eval_for_each", f"{loop_var_name} over {len(items.elements)} items")
        definition = self.scope_stack.create_definition(loop_var_range, loop_var_name)
        self.data.add_definition(definition)

        # One scope for the whole loop; the loop variable is rebound each run.
        with self.scope_stack.scope():
            self._note_depth()
            for item in list(items.elements):
                self.scope_stack.define_current(loop_var_name, item, definition)
                self.data.add_reference(definition, loop_var_range)
                self.eval_statements(node.statements)

    def eval_generic_function(self, node):
        alias = self.eval_rvalue(node.alias)
        if not isinstance(alias.value, String):
            raise EvaluationError(self._range(alias.range), f"Alias must evaluate to a String, but instead evaluates to {type_name_a(alias.value)}")
        debug_log("eval_generic_function", alias.value.value)
        self.eval_scoped(node.statements)

    def eval_error_statement(self, node):
        evaluated = self.eval_rvalue(node.value)
        if not isinstance(evaluated.value, String):
            raise EvaluationError(self._range(node.range), f"'Error' argument must evaluate to a String, but instead evaluates to {type_name_a(evaluated.value)}")
        debug_log("Error()", evaluated.value.value)

    def eval_print_statement(self, node):
        evaluated = self.eval_rvalue(node.value)
        if type(node.value) != EvaluatedVariable and not isinstance(evaluated.value, String):
            raise EvaluationError(self._range(node.range), f"'Print' argument must either be a variable or evaluate to a String, but instead is {type_name_a(evaluated.value)}")
        debug_log("Print()", evaluated.value.inspect())

    # === IF ===

    def eval_if(self, node):
        statement_range = self._range(node.range)
        condition = node.condition
        condition_type = type(condition)

        if condition_type == IfConditionBoolean:
            result = self._eval_boolean_condition(condition, statement_range)
        elif condition_type == IfConditionComparison:
            result = self._eval_comparison_condition(condition, statement_range)
        elif condition_type == IfConditionIn:
            result = self._eval_in_condition(condition, statement_range)
        else:
            raise InternalEvaluationError(statement_range, f"Unknown condition type from condition '{condition!r}'")

        debug_log("eval_if", result)
        if result:
            self.eval_scoped(node.statements)

    def _eval_condition_operand(self, operand, statement_range):
        if type(operand) != EvaluatedVariable:
            raise EvaluationError(statement_range, f"'If' condition must be an evaluated variable, but instead is '{type(operand).__name__}'")
        return self.eval_evaluated_variable(operand).value

    def _eval_boolean_condition(self, condition, statement_range):
        value = self._eval_condition_operand(condition.value, statement_range)
        if not isinstance(value, Boolean):
            raise EvaluationError(self._range(condition.value.range), f"Condition must evaluate to a Boolean, but instead evaluates to {type_name_a(value)}")
        return (not value.value) if condition.invert else value.value

    def _eval_comparison_condition(self, condition, statement_range):
        lhs = self._eval_condition_operand(condition.lhs, statement_range)
        rhs = self._eval_condition_operand(condition.rhs, statement_range)

        if type_name(lhs) != type_name(rhs):
            range = SourceRange.from_positions(self.this_uri, condition.lhs.range.start, condition.rhs.range.end)
            raise EvaluationError(range, f"'If' condition comparison must compare variables of the same type, but LHS is {type_name_a(lhs)} and RHS is {type_name_a(rhs)}")

        operator = condition.operator
        if operator.value == '==':
            return lhs == rhs
        if operator.value == '!=':
            return lhs != rhs

        compare = _ORDERING.get(operator.value)
        if compare is None:
            raise InternalEvaluationError(statement_range, f"Unknown 'If' comparison operator '{operator.value}'")
        # Booleans (and the aggregate kinds) only support equality.
        if type_name(lhs) not in ('Integer', 'String'):
            raise EvaluationError(self._range(operator.range), f"'If' comparison of {type_name(lhs)}s only supports '==' and '!=', but instead is '{operator.value}'")
        return compare(lhs.value, rhs.value)

    def _eval_in_condition(self, condition, statement_range):
        lhs = self._eval_condition_operand(condition.lhs, statement_range)
        rhs = self._eval_condition_operand(condition.rhs, statement_range)
        lhs_range = self._range(condition.lhs.range)
        rhs_range = self._range(condition.rhs.range)

        if not isinstance(rhs, Array):
            raise EvaluationError(rhs_range, f"'If' 'in' condition right-hand-side variable must be an Array of Strings, but instead is {type_name_a(rhs)}")

        if not rhs.elements:
            result = False
        elif not isinstance(rhs.elements[0], String):
            raise EvaluationError(rhs_range, f"'If' 'in' condition right-hand-side variable must be an Array of Strings, but instead is an Array of {type_name(rhs.elements[0])}s")
        elif isinstance(lhs, String):
            result = lhs in rhs.elements
        elif isinstance(lhs, Array):
            if not lhs.elements:
                result = False
            elif not isinstance(lhs.elements[0], String):
                raise EvaluationError(lhs_range, f"'If' 'in' condition left-hand-side variable must be either a String or an Array of Strings, but instead is an Array of {type_name(lhs.elements[0])}s")
            else:
                result = any(item in rhs.elements for item in lhs.elements)
        else:
            raise EvaluationError(lhs_range, f"'If' 'in' condition left-hand-side variable must be either a String or an Array of Strings, but instead is {type_name_a(lhs)}")

        return (not result) if condition.invert else result
