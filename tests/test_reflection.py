"""Tests for runtime enumeration of definition sites."""

import collections

import pytest

from docchef.models import CallableReference
from docchef.reflection import enumerate_definitions, resolve_type_descriptor

DISPATCH_SOURCE = """\
from functools import singledispatch

@singledispatch
def render(value):
    return str(value)


@render.register
def _(value: int):
    return f"int {value}"


@render.register
def _(value: list):
    return ", ".join(map(str, value))
"""

OVERLOAD_SOURCE = """\
from typing import overload


@overload
def scale(value: int) -> int: ...


@overload
def scale(value: str) -> str: ...


def scale(value):
    return value * 2
"""

PLAIN_SOURCE = """\
class Greeter:
    def greet(self, name: str) -> str:
        return f"hi {name}"

    @staticmethod
    def shout(text):
        return text.upper()


def plain(a, b):
    return a + b
"""

WRAPPED_SOURCE = """\
import functools

def logged(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)
    return wrapper

@logged
def work(x):
    return x
"""

DISPATCH_METHOD_SOURCE = """\
from functools import singledispatchmethod


class Formatter:
    @singledispatchmethod
    def format(self, value):
        return str(value)

    @format.register
    def _(self, value: int):
        return f"#{value}"
"""


def _lines(candidates):
    return [c.site.start_line for c in candidates]


class TestSingleDispatch:
    def test_every_registration_is_a_candidate(self, importable):
        path = importable("chef_dispatch_all", DISPATCH_SOURCE)

        candidates = enumerate_definitions(CallableReference("chef_dispatch_all.render"))

        assert _lines(candidates) == [3, 8, 13]
        assert all(c.site.file_path == str(path.resolve()) for c in candidates)
        assert candidates[1].label.startswith("render(value: int)")

    def test_signature_narrows_registrations(self, importable):
        importable("chef_dispatch_int", DISPATCH_SOURCE)

        candidates = enumerate_definitions(
            CallableReference("chef_dispatch_int.render", signature=("int",))
        )

        assert _lines(candidates) == [3, 8]

    def test_subclass_matches_registration(self, importable):
        importable("chef_dispatch_bool", DISPATCH_SOURCE)

        candidates = enumerate_definitions(
            CallableReference("chef_dispatch_bool.render", signature=(bool,))
        )

        assert _lines(candidates) == [3, 8]

    def test_singledispatchmethod(self, importable):
        importable("chef_dispatch_method", DISPATCH_METHOD_SOURCE)

        candidates = enumerate_definitions(
            CallableReference("chef_dispatch_method.Formatter.format")
        )

        assert _lines(candidates) == [5, 9]


class TestOverloads:
    def test_overloads_then_implementation(self, importable):
        importable("chef_overload_all", OVERLOAD_SOURCE)

        candidates = enumerate_definitions(CallableReference("chef_overload_all.scale"))

        assert _lines(candidates) == [4, 8, 12]

    def test_signature_narrows_overloads(self, importable):
        importable("chef_overload_str", OVERLOAD_SOURCE)

        candidates = enumerate_definitions(
            CallableReference("chef_overload_str.scale", signature=("str",))
        )

        assert _lines(candidates) == [8, 12]


class TestPlainDefinitions:
    def test_function(self, importable):
        importable("chef_plain_func", PLAIN_SOURCE)

        candidates = enumerate_definitions(CallableReference("chef_plain_func.plain"))

        assert _lines(candidates) == [10]
        assert candidates[0].label == "plain(a, b)"

    def test_class(self, importable):
        importable("chef_plain_class", PLAIN_SOURCE)

        candidates = enumerate_definitions(CallableReference("chef_plain_class.Greeter"))

        assert _lines(candidates) == [1]
        assert candidates[0].label == "class Greeter"

    def test_method_signature_skips_self(self, importable):
        importable("chef_plain_method", PLAIN_SOURCE)
        name = "chef_plain_method.Greeter.greet"

        assert _lines(enumerate_definitions(CallableReference(name))) == [2]
        assert _lines(enumerate_definitions(CallableReference(name, signature=("str",)))) == [2]
        assert enumerate_definitions(CallableReference(name, signature=("int",))) == []
        assert enumerate_definitions(CallableReference(name, signature=("str", "str"))) == []

    def test_staticmethod_starts_at_decorator(self, importable):
        importable("chef_plain_static", PLAIN_SOURCE)

        candidates = enumerate_definitions(CallableReference("chef_plain_static.Greeter.shout"))

        assert _lines(candidates) == [5]

    def test_wrapped_function_points_at_original(self, importable):
        importable("chef_wrapped", WRAPPED_SOURCE)

        candidates = enumerate_definitions(CallableReference("chef_wrapped.work"))

        assert _lines(candidates) == [9]


class TestScope:
    def test_name_within_scope_module(self, importable):
        importable("chef_scoped", PLAIN_SOURCE)

        candidates = enumerate_definitions(CallableReference("plain", scope="chef_scoped"))

        assert _lines(candidates) == [10]

    def test_missing_module_in_scope_is_skipped(self, importable):
        importable("chef_scoped_mixed", PLAIN_SOURCE)

        candidates = enumerate_definitions(
            CallableReference("plain", scope=("chef_no_such_module", "chef_scoped_mixed"))
        )

        assert _lines(candidates) == [10]

    def test_duplicate_sites_are_dropped(self, importable):
        importable("chef_scoped_twice", PLAIN_SOURCE)

        candidates = enumerate_definitions(
            CallableReference("Greeter.greet", scope=("chef_scoped_twice", "chef_scoped_twice"))
        )

        assert _lines(candidates) == [2]

    def test_unknown_attribute(self, importable):
        importable("chef_unknown", PLAIN_SOURCE)

        assert enumerate_definitions(CallableReference("chef_unknown.nothing")) == []

    def test_builtin_without_source(self):
        assert enumerate_definitions(CallableReference("builtins.len")) == []


class TestResolveTypeDescriptor:
    def test_class_passes_through(self):
        assert resolve_type_descriptor(float) is float

    def test_builtin_name(self):
        assert resolve_type_descriptor("int") is int

    def test_dotted_name(self):
        assert resolve_type_descriptor("collections.OrderedDict") is collections.OrderedDict

    @pytest.mark.parametrize("descriptor", ["len", "os.path", "chef_missing_mod.Thing"])
    def test_not_a_type(self, descriptor):
        with pytest.raises(ValueError):
            resolve_type_descriptor(descriptor)
