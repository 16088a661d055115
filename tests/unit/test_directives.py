"""Pytest coverage for preprocessor directives and includes."""

import pytest

from bffeval.bff_ast import ParseData, ParseError
from bffeval.resources import InMemoryFileSystem

from builders import (
    ROOT_URI, assign, assign_parent, define, defined, directive_if, env_exists, file_exists,
    import_env, include, integer, lit, once, rng, root_values, run, run_ok, scoped,
    template, undefine, unnamed, var,
)

SUB_URI = 'file:///project/sub/inc.bff'


class TestInclude:
    def test_statements_share_the_including_scope(self):
        evaluator, _ = run_ok(
            include('sub/inc.bff'),
            assign('Copy', var('FromInclude')),
            trees={SUB_URI: [assign('FromInclude', lit('x'))]},
        )
        assert root_values(evaluator) == {'FromInclude': 'x', 'Copy': 'x'}

    def test_ranges_carry_the_included_uri(self):
        _, result = run_ok(
            include('sub/inc.bff'),
            trees={SUB_URI: [assign('X', integer(1))]},
        )
        assert result.data.variable_definitions[0].range.uri == SUB_URI

    def test_path_is_relative_to_current_file(self):
        evaluator, _ = run_ok(
            include('sub/inc.bff'),
            trees={
                SUB_URI: [include('nested.bff')],
                'file:///project/sub/nested.bff': [assign('Deep', lit('yes'))],
            },
        )
        assert root_values(evaluator) == {'Deep': 'yes'}

    def test_backslash_and_parent_paths(self):
        evaluator, _ = run_ok(
            include('sub\\inc.bff'),
            trees={
                SUB_URI: [include('..\\common.bff')],
                'file:///project/common.bff': [assign('Common', integer(1))],
            },
        )
        assert root_values(evaluator) == {'Common': 1}

    def test_current_bff_dir_is_rebound(self):
        evaluator, _ = run_ok(
            assign('Before', var('_CURRENT_BFF_DIR_')),
            assign('During', lit('')),
            include('sub/inc.bff'),
            assign('After', var('_CURRENT_BFF_DIR_')),
            trees={SUB_URI: [assign('During', template('[', var('_CURRENT_BFF_DIR_'), ']'))]},
        )
        values = root_values(evaluator)
        assert values['Before'] == ''
        assert values['During'] == '[sub]'
        assert values['After'] == ''

    def test_working_dir_is_the_root_directory(self):
        evaluator, _ = run_ok(
            include('sub/inc.bff'),
            trees={SUB_URI: [assign('Dir', var('_WORKING_DIR_'))]},
        )
        assert root_values(evaluator)['Dir'] == '/project'

    def test_unnamed_operator_continues_across_include(self):
        evaluator, _ = run_ok(
            assign('S', lit('a')),
            include('sub/inc.bff'),
            trees={SUB_URI: [unnamed('+', lit('b'))]},
        )
        assert root_values(evaluator) == {'S': 'ab'}

    def test_missing_include(self):
        _, result = run(include('missing.bff', rng(3, 9, 22)))
        assert result.error.message == 'Unable to open include: No such file: file:///project/missing.bff'
        assert result.error.range.start == rng(3, 9, 22).start
        assert result.error.range.uri == ROOT_URI

    def test_parse_error_is_forwarded_unchanged(self):
        parse_error = ParseError('Unexpected token', uri=SUB_URI)
        _, result = run(
            assign('X', integer(1)),
            include('sub/inc.bff'),
            trees={SUB_URI: parse_error},
        )
        assert result.error is parse_error
        assert [d.name for d in result.data.variable_definitions] == ['X']

    def test_error_inside_include_restores_state(self):
        evaluator, result = run(
            include('sub/inc.bff'),
            trees={SUB_URI: [assign('X', var('Missing'))]},
        )
        assert result.error.range.uri == SUB_URI
        assert evaluator.this_uri == ROOT_URI
        assert evaluator.scope_stack.lookup('_CURRENT_BFF_DIR_', None).value.value == ''

    def test_include_cycle_is_an_error(self):
        evaluator, result = run(
            assign('X', integer(1)),
            include('fbuild.bff'),
            trees={ROOT_URI: [include('fbuild.bff', rng(5, 9, 20))]},
        )
        assert not result.error.is_internal
        assert result.error.message.startswith(f'Too many nested includes (more than 128) while including {ROOT_URI}')
        assert result.error.range.start == rng(5, 9, 20).start
        assert [d.name for d in result.data.variable_definitions] == ['X']
        assert evaluator.include_depth == 0
        assert evaluator.this_uri == ROOT_URI

    def test_include_depth_limit_is_configurable(self, _default_config):
        _default_config.max_include_depth = 2
        evaluator, result = run(
            include('sub/inc.bff'),
            trees={
                SUB_URI: [include('a.bff')],
                'file:///project/sub/a.bff': [include('b.bff')],
                'file:///project/sub/b.bff': [],
            },
        )
        assert 'more than 2' in result.error.message
        assert evaluator.summary['includes'] == 2

    def test_guarded_self_include(self):
        statements = [
            directive_if(
                [[defined('GUARD', invert=True)]],
                [define('GUARD'), include('fbuild.bff')],
                [assign('Seen', lit('twice'))],
            ),
        ]
        evaluator, _ = run_ok(*statements, trees={ROOT_URI: statements})
        assert root_values(evaluator) == {'Seen': 'twice'}

    def test_include_counts(self):
        evaluator, _ = run_ok(
            include('sub/inc.bff'),
            include('sub/inc.bff'),
            trees={SUB_URI: []},
        )
        assert evaluator.summary['includes'] == 2


class TestOnce:
    def test_once_file_is_included_once(self):
        evaluator, result = run_ok(
            assign('Count', integer(0)),
            include('sub/inc.bff'),
            include('sub/inc.bff'),
            include('./sub/inc.bff'),
            trees={SUB_URI: [once(), scoped(assign_parent('Count', integer(1)))]},
        )
        assert evaluator.summary['includes'] == 1
        assert evaluator.summary['skipped_once_includes'] == 2
        assert evaluator.once_uris == {SUB_URI}

    def test_once_state_is_per_pass(self):
        evaluator, _ = run_ok(
            include('sub/inc.bff'),
            trees={SUB_URI: [once()]},
        )
        evaluator.evaluate(ParseData([include('sub/inc.bff')]), ROOT_URI)
        assert evaluator.summary['includes'] == 1


class TestDirectiveIf:
    def test_undefined_symbol_takes_else_branch(self):
        evaluator, _ = run_ok(
            directive_if(
                [[defined('EXISTS_SOMETHING_UNDEFINED')]],
                [assign('X', integer(1))],
                [assign('X', integer(2))],
            ),
        )
        assert root_values(evaluator) == {'X': 2}

    def test_platform_symbol_is_defined(self):
        evaluator, _ = run_ok(
            directive_if([[defined('__LINUX__')]], [assign('X', integer(1))], [assign('X', integer(2))]),
        )
        assert root_values(evaluator) == {'X': 1}

    @pytest.mark.parametrize("condition, expected", [
        ([[defined('A'), defined('B')]], False),
        ([[defined('A'), defined('Z', invert=True)]], True),
        ([[defined('Z')], [defined('A')]], True),
        ([[defined('Z')], [defined('Y')]], False),
        ([[defined('A', invert=True)]], False),
        ([[env_exists()]], False),
        ([[env_exists(invert=True)]], True),
    ])
    def test_or_of_ands(self, condition, expected):
        evaluator, _ = run_ok(
            define('A'),
            directive_if(condition, [assign('X', lit('then'))], [assign('X', lit('else'))]),
        )
        assert root_values(evaluator)['X'] == ('then' if expected else 'else')

    def test_branches_are_not_scoped(self):
        evaluator, _ = run_ok(
            directive_if([[defined('__LINUX__')]], [assign('Inline', integer(1))]),
            assign('Copy', var('Inline')),
        )
        assert root_values(evaluator) == {'Inline': 1, 'Copy': 1}

    def test_empty_else(self):
        evaluator, _ = run_ok(directive_if([[defined('NOPE')]], [assign('X', integer(1))]))
        assert root_values(evaluator) == {}

    def test_file_exists_is_relative_to_current_file(self):
        files = {'file:///project/sub/local.txt': ''}
        evaluator, _ = run_ok(
            include('sub/inc.bff'),
            files=files,
            trees={SUB_URI: [
                directive_if([[file_exists('local.txt')]], [assign('Found', lit('yes'))], [assign('Found', lit('no'))]),
            ]},
        )
        assert root_values(evaluator) == {'Found': 'yes'}

    def test_file_exists_missing(self):
        evaluator, _ = run_ok(
            directive_if([[file_exists('nope.txt')]], [assign('Found', lit('yes'))], [assign('Found', lit('no'))]),
        )
        assert root_values(evaluator) == {'Found': 'no'}

    def test_file_exists_failure_is_an_error(self):
        class DeniedFileSystem(InMemoryFileSystem):
            def file_exists(self, uri):
                raise PermissionError('denied')

        evaluator, result = run(
            assign('X', integer(1)),
            directive_if([[file_exists('local.txt')]], [assign('Found', lit('yes'))]),
            file_system=DeniedFileSystem(),
        )
        assert not result.error.is_internal
        assert result.error.message == 'Unable to check whether file exists: denied'
        assert result.error.range.uri == ROOT_URI
        assert isinstance(result.error.__cause__, PermissionError)
        assert root_values(evaluator) == {'X': 1}

    def test_unnamed_operator_continues_into_branch(self):
        evaluator, _ = run_ok(
            assign('S', lit('a')),
            directive_if([[defined('__LINUX__')]], [unnamed('+', lit('b'))]),
        )
        assert root_values(evaluator) == {'S': 'ab'}


class TestDefines:
    def test_define_then_test(self):
        evaluator, _ = run_ok(
            define('FEATURE'),
            directive_if([[defined('FEATURE')]], [assign('X', integer(1))]),
        )
        assert 'FEATURE' in evaluator.defines

    def test_define_twice(self):
        _, result = run(define('FEATURE'), define('FEATURE', rng(1, 8, 15)))
        assert result.error.message == 'Cannot #define already defined symbol "FEATURE".'
        assert result.error.range.start == rng(1, 8, 15).start

    def test_undefine(self):
        evaluator, _ = run_ok(define('FEATURE'), undefine('FEATURE'))
        assert evaluator.defines == {'__LINUX__'}

    def test_undefine_undefined(self):
        _, result = run(undefine('FEATURE'))
        assert result.error.message == 'Cannot #undef undefined symbol "FEATURE".'

    def test_undefine_platform_symbol(self):
        _, result = run(undefine('__LINUX__'))
        assert result.error.message == 'Cannot #undef built-in symbol "__LINUX__".'

    def test_defines_are_per_pass(self):
        evaluator, _ = run_ok(define('FEATURE'))
        result = evaluator.evaluate(ParseData([define('FEATURE')]), ROOT_URI)
        assert result.ok


class TestImportEnvVar:
    def test_binds_placeholder(self):
        evaluator, result = run_ok(import_env('PATH'))
        assert root_values(evaluator) == {'PATH': 'placeholder-PATH-value'}
        assert [d.name for d in result.data.variable_definitions] == ['PATH']

    def test_placeholder_is_configurable(self, _default_config):
        _default_config.env_var_placeholder = '<{symbol}>'
        evaluator, _ = run_ok(import_env('HOME'))
        assert root_values(evaluator) == {'HOME': '<HOME>'}

    def test_reimport_keeps_identity(self):
        _, result = run_ok(import_env('PATH'), import_env('PATH'))
        assert len(result.data.variable_definitions) == 1
