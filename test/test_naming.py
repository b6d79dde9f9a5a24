import pytest

from shadowmatic.failures import (
    ConfigurationError,
    InvalidAttributeName,
    InvalidFormatter,
)
from shadowmatic.naming import (
    DEFAULT_INSTANCE,
    prefix_with,
    resolve_external_name,
    resolve_internal_name,
    suffix_with,
    validate_identifier,
)
from dataset.shadow_classes import Foo


def test_external_name_defaults_to_attribute_name():
    assert resolve_external_name("a") == "a"


def test_formatter_is_applied():
    assert resolve_external_name("a", fmt=prefix_with("pfx_")) == "pfx_a"
    assert resolve_external_name("a", fmt=suffix_with("_sfx")) == "a_sfx"


def test_explicit_name_bypasses_formatter():
    assert resolve_external_name("a", "alpha", prefix_with("pfx_")) == "alpha"


def test_empty_explicit_name_falls_back_to_formatter():
    assert resolve_external_name("a", "", prefix_with("pfx_")) == "pfx_a"
    assert resolve_external_name("a", None, prefix_with("pfx_")) == "pfx_a"


def test_failing_formatter():
    def fmt(name):
        raise KeyError(name)

    with pytest.raises(InvalidFormatter) as e:
        resolve_external_name("a", fmt=fmt)
    assert isinstance(e.value, ConfigurationError)
    assert isinstance(e.value.__cause__, KeyError)


@pytest.mark.parametrize("result", [3, None, "", "not valid"])
def test_formatter_must_return_attribute_name(result):
    with pytest.raises(ConfigurationError):
        resolve_external_name("a", fmt=lambda name: result)


def test_invalid_explicit_name():
    with pytest.raises(InvalidAttributeName):
        resolve_external_name("a", "1alpha")


def test_internal_name():
    module = Foo.__module__
    assert resolve_internal_name(Foo, "a") == f"_shadow.{module}.Foo.__default__.a"
    assert resolve_internal_name(Foo, "a", DEFAULT_INSTANCE) == resolve_internal_name(Foo, "a")
    assert resolve_internal_name(Foo, "a", "left") == f"_shadow.{module}.Foo.left.a"


def test_qualifier_and_attribute_names_do_not_run_together():
    assert resolve_internal_name(Foo, "x_a") != resolve_internal_name(Foo, "a", "x")
    assert resolve_internal_name(Foo, "b", "x_a") != resolve_internal_name(Foo, "a_b", "x")


def test_types_sharing_a_name_get_distinct_internal_names():
    class Outer:
        class Foo:
            pass

    other_module_foo = type("Foo", (), {"__module__": "other.module"})
    names = {
        resolve_internal_name(Foo, "a"),
        resolve_internal_name(Outer.Foo, "a"),
        resolve_internal_name(other_module_foo, "a"),
    }
    assert len(names) == 3


def test_public_internal_name_is_external_name():
    assert resolve_internal_name(Foo, "a", private=False) == "a"
    assert resolve_internal_name(Foo, "a", private=False, external_name="pfx_a") == "pfx_a"


def test_validate_identifier():
    assert validate_identifier("a_b") == "a_b"
    for name in ["", "a-b", "1a", 3]:
        with pytest.raises(InvalidAttributeName):
            validate_identifier(name)
