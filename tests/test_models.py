from dataclasses import FrozenInstanceError

import pytest

from docchef.models import (
    Candidate,
    CallableReference,
    Completeness,
    Definition,
    DefinitionSite,
    ExtractedSource,
    Parameter,
    ParseOutcome,
)


def test_reference_scope_string_becomes_tuple():
    ref = CallableReference(name="render", scope="pkg.mod")
    assert ref.scope == ("pkg.mod",)


def test_reference_scope_list_becomes_tuple():
    ref = CallableReference(name="render", scope=["a", "b"])
    assert ref.scope == ("a", "b")


def test_reference_signature_becomes_tuple():
    ref = CallableReference(name="render", signature=[int, "str"])
    assert ref.signature == (int, "str")


def test_reference_defaults():
    ref = CallableReference(name="render")
    assert ref.signature is None
    assert ref.scope is None


def test_reference_is_hashable():
    assert hash(CallableReference("a", scope=["m"])) == hash(CallableReference("a", scope=("m",)))


def test_definition_site_str():
    assert str(DefinitionSite("foo/bar.ext", 42)) == "foo/bar.ext:42"


@pytest.mark.parametrize("line", [0, -1])
def test_definition_site_rejects_non_positive_line(line):
    with pytest.raises(ValueError):
        DefinitionSite("a.py", line)


def test_definition_site_is_frozen():
    site = DefinitionSite("a.py", 1)
    with pytest.raises(FrozenInstanceError):
        site.start_line = 2


def test_candidate_default_label():
    assert Candidate(DefinitionSite("a.py", 1)).label == ""


def test_extracted_source_text_and_end_line():
    extracted = ExtractedSource(DefinitionSite("a.py", 10), ("def f():", "    return 1"))

    assert extracted.text == "def f():\n    return 1"
    assert extracted.end_line == 11


def test_extracted_source_rejects_empty_lines():
    with pytest.raises(ValueError):
        ExtractedSource(DefinitionSite("a.py", 1), ())


def test_extracted_source_to_dict():
    extracted = ExtractedSource(DefinitionSite("a.py", 3), ("x = 1",))

    assert extracted.to_dict() == {"path": "a.py", "start": 3, "end": 3, "code": "x = 1"}


def test_parse_outcome_is_complete():
    assert ParseOutcome(Completeness.COMPLETE).is_complete
    assert not ParseOutcome(Completeness.INCOMPLETE).is_complete
    assert not ParseOutcome(Completeness.INVALID).is_complete


def test_parameter_creation():
    param = Parameter(name="x", type="int", default="5")
    assert param.name == "x"
    assert param.type == "int"
    assert param.default == "5"


def test_parameter_without_type_or_default():
    param = Parameter(name="x")
    assert param.type is None
    assert param.default is None


def test_definition_params_default_to_empty():
    assert Definition(kind="function", qualname="area", line=1).params == []
