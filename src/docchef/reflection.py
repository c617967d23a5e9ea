"""Enumerate definition sites of a callable through runtime reflection.

A name may resolve to several definition sites: every implementation
registered on a `functools.singledispatch` function, or every
`typing.overload` stub plus the implementation. Sites are returned in
declaration order so repeated calls are stable.
"""

import builtins
import functools
import importlib
import inspect
import logging
import os
import pkgutil
import typing
from collections.abc import Iterator

from docchef.models import Candidate, CallableReference, DefinitionSite

logger = logging.getLogger(__name__)


def resolve_type_descriptor(descriptor) -> type:
    """Turn a type descriptor (a class or a class name) into a class.

    Bare names are looked up in `builtins`; dotted names are imported.

    Raises:
        ValueError: If the descriptor does not name a class
    """
    if isinstance(descriptor, type):
        return descriptor

    candidate = getattr(builtins, descriptor, None)
    if not isinstance(candidate, type):
        try:
            candidate = pkgutil.resolve_name(descriptor)
        except (ImportError, AttributeError, ValueError) as e:
            raise ValueError(f"Unknown type: {descriptor}") from e

    if not isinstance(candidate, type):
        raise ValueError(f"Not a type: {descriptor}")
    return candidate


def _lookup(name: str, module_name: str | None):
    """Find the object `name` refers to.

    Returns:
        Tuple of (object, defined_in_class). Attributes of classes are read
        statically so descriptors such as singledispatchmethod, staticmethod
        and classmethod are seen undecorated by attribute access.
    """
    if module_name is not None:
        owner = importlib.import_module(module_name)
        path = name.split(".")
    elif "." not in name:
        return pkgutil.resolve_name(name), False
    else:
        owner_name, _, attribute = name.rpartition(".")
        owner = pkgutil.resolve_name(owner_name)
        path = [attribute]

    for part in path[:-1]:
        owner = getattr(owner, part)

    if not inspect.isclass(owner):
        return getattr(owner, path[-1]), False

    attribute = inspect.getattr_static(owner, path[-1])
    if isinstance(attribute, staticmethod):
        return attribute.__func__, False
    if isinstance(attribute, classmethod):
        return attribute.__func__, True
    if isinstance(attribute, property):
        return attribute.fget, True
    return attribute, True


def _dispatch_registry(obj):
    if isinstance(obj, functools.singledispatchmethod):
        return obj.dispatcher.registry
    registry = getattr(obj, "registry", None)
    if registry is not None and hasattr(obj, "dispatch"):
        return registry
    return None


def _positional_parameters(func, defined_in_class: bool):
    """Positional parameters of `func` and whether it accepts *args."""
    try:
        signature = inspect.signature(func, eval_str=True)
    except (NameError, SyntaxError, TypeError):
        signature = inspect.signature(func)

    positional = []
    variadic = False
    for parameter in signature.parameters.values():
        if parameter.kind in (parameter.POSITIONAL_ONLY, parameter.POSITIONAL_OR_KEYWORD):
            positional.append(parameter)
        elif parameter.kind is parameter.VAR_POSITIONAL:
            variadic = True

    if defined_in_class and positional:
        positional = positional[1:]  # self / cls
    return positional, variadic


def _signature_matches(func, signature: tuple | None, defined_in_class: bool) -> bool:
    """Check that argument types `signature` could be passed to `func`."""
    if signature is None:
        return True

    try:
        positional, variadic = _positional_parameters(func, defined_in_class)
    except (TypeError, ValueError):
        # No introspectable signature; cannot rule it out
        return True

    if len(signature) > len(positional) and not variadic:
        return False

    for parameter, argument_type in zip(positional, signature):
        annotation = parameter.annotation
        if not isinstance(annotation, type):
            continue
        try:
            if not issubclass(argument_type, annotation):
                return False
        except TypeError:
            # typing.Any and friends refuse issubclass()
            continue

    return True


def _site_for(obj) -> DefinitionSite | None:
    target = inspect.unwrap(obj)
    try:
        file_path = inspect.getsourcefile(target)
        _, line = inspect.getsourcelines(target)
    except (TypeError, OSError) as e:
        logger.debug("No source available for %r: %s", obj, e)
        return None

    if file_path is None or line < 1:
        logger.debug("No definition line for %r", obj)
        return None

    return DefinitionSite(file_path=os.path.abspath(file_path), start_line=line)


def _label(obj, name: str | None = None) -> str:
    name = name or getattr(obj, "__qualname__", None) or repr(obj)
    if inspect.isclass(obj):
        return f"class {name}"
    try:
        return f"{name}{inspect.signature(obj)}"
    except (TypeError, ValueError):
        return name


def _candidates_for(obj, signature: tuple | None, defined_in_class: bool) -> Iterator[Candidate]:
    registry = _dispatch_registry(obj)
    if registry is not None:
        dispatcher_name = getattr(obj, "__qualname__", None) or getattr(obj.func, "__qualname__", None)
        for cls, implementation in registry.items():
            if signature and not issubclass(signature[0], cls):
                continue
            site = _site_for(implementation)
            if site is not None:
                yield Candidate(site=site, label=_label(implementation, dispatcher_name))
        return

    if inspect.isclass(obj):
        site = _site_for(obj)
        if site is not None:
            yield Candidate(site=site, label=_label(obj))
        return

    if not callable(obj):
        logger.debug("%r is not callable", obj)
        return

    function = inspect.unwrap(obj)
    overloads = typing.get_overloads(function) if inspect.isroutine(function) else []
    for overload in overloads:
        if _signature_matches(overload, signature, defined_in_class):
            site = _site_for(overload)
            if site is not None:
                yield Candidate(site=site, label=_label(overload))

    if _signature_matches(function, signature, defined_in_class):
        site = _site_for(obj)
        if site is not None:
            yield Candidate(site=site, label=_label(function))


def enumerate_definitions(ref: CallableReference) -> list[Candidate]:
    """Enumerate definition sites matching a callable reference.

    Args:
        ref: Name, optional argument-type signature and optional module scope

    Returns:
        Candidates in declaration order, without duplicate sites. Names that
        cannot be looked up in a scope module contribute nothing.
    """
    signature = None
    if ref.signature is not None:
        signature = tuple(resolve_type_descriptor(d) for d in ref.signature)

    candidates = []
    seen = set()

    for module_name in ref.scope or (None,):
        try:
            obj, defined_in_class = _lookup(ref.name, module_name)
        except (ImportError, AttributeError, ValueError) as e:
            logger.debug("Cannot look up %s in %s: %s", ref.name, module_name or "<global>", e)
            continue

        for candidate in _candidates_for(obj, signature, defined_in_class):
            if candidate.site in seen:
                continue
            seen.add(candidate.site)
            candidates.append(candidate)

    logger.debug("Found %d candidate(s) for %s", len(candidates), ref.name)
    return candidates
