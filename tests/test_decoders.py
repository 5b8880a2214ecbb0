"""Tests for type, visibility and mutability decoding."""

import pytest

from sclass_cli.decoders import (
    decode_state_mutability,
    decode_visibility,
    parse_mapping_key,
    parse_return_type,
    parse_type_name,
    parse_visibility,
)
from sclass_cli.errors import UnhandledTypeNameError
from sclass_cli.syntax import (
    ArrayTypeName,
    Attribute,
    ElementaryTypeName,
    MappingTypeName,
    OtherTypeName,
    UserDefinedTypeName,
)

UINT = ElementaryTypeName("uint256")


class FakeParameter:
    def __init__(self, type_name, name=None):
        self.type_name = type_name
        self.name = name


class TestParseTypeName:

    def test_absent_type_is_empty(self):
        assert parse_type_name(None) == "empty"

    def test_elementary(self):
        assert parse_type_name(ElementaryTypeName("address")) == "address"

    def test_user_defined_drops_qualification(self):
        assert parse_type_name(UserDefinedTypeName(("Lib", "Position"))) == "Position"

    def test_array_of_user_defined(self):
        assert parse_type_name(ArrayTypeName(UserDefinedTypeName(("Position",)))) == "Position[]"

    def test_nested_array(self):
        assert parse_type_name(ArrayTypeName(ArrayTypeName(UINT))) == "uint256[][]"

    def test_nested_mapping_renders_recursively(self):
        inner = MappingTypeName(key=ElementaryTypeName("bytes32"), value=UINT)
        outer = MappingTypeName(key=ElementaryTypeName("address"), value=inner)
        assert parse_type_name(outer) == "mapping(address => mapping(bytes32 => uint256))"

    def test_mapping_key_keeps_dotted_path(self):
        mapping = MappingTypeName(key=UserDefinedTypeName(("Lib", "Status")), value=UINT)
        assert parse_type_name(mapping) == "mapping(Lib.Status => uint256)"

    def test_unhandled_kind_raises(self):
        with pytest.raises(UnhandledTypeNameError, match="function_type"):
            parse_type_name(OtherTypeName("function_type"))

    def test_unhandled_kind_inside_array_raises(self):
        with pytest.raises(UnhandledTypeNameError):
            parse_type_name(ArrayTypeName(OtherTypeName("function_type")))

    def test_mapping_key_absent(self):
        assert parse_mapping_key(None) == "empty"


class TestVisibility:

    @pytest.mark.parametrize("raw", ["external", "public", "internal", "private"])
    def test_known_keywords(self, raw):
        assert parse_visibility(raw) == raw

    @pytest.mark.parametrize("raw", [None, "", "virtual", "PUBLIC"])
    def test_default_is_internal(self, raw):
        assert parse_visibility(raw) == "internal"

    def test_no_attributes_defaults_to_internal(self):
        assert decode_visibility([]) == "internal"

    def test_last_visibility_wins(self):
        attrs = [Attribute("visibility", "public"), Attribute("visibility", "private")]
        assert decode_visibility(attrs) == "private"

    def test_override_and_modifiers_are_not_visibility(self):
        attrs = [
            Attribute("override", "override(public)"),
            Attribute("modifier_invocation", "external"),
            Attribute("visibility", "public"),
        ]
        assert decode_visibility(attrs) == "public"

    def test_modifier_named_like_keyword_is_ignored(self):
        assert decode_visibility([Attribute("modifier_invocation", "private")]) == "internal"


class TestStateMutability:

    def test_default_is_mutative(self):
        assert decode_state_mutability([Attribute("visibility", "public")]) == "mutative"

    @pytest.mark.parametrize("keyword", ["view", "pure", "payable"])
    def test_keywords(self, keyword):
        assert decode_state_mutability([Attribute("mutability", keyword)]) == keyword

    def test_legacy_constant(self):
        assert decode_state_mutability([Attribute("constant", "constant")]) == "constant"

    def test_modifier_invocation_is_not_mutability(self):
        attrs = [Attribute("modifier_invocation", "view"), Attribute("override", "override")]
        assert decode_state_mutability(attrs) == "mutative"

    def test_last_mutability_wins(self):
        attrs = [Attribute("mutability", "view"), Attribute("mutability", "pure")]
        assert decode_state_mutability(attrs) == "pure"


class TestReturnType:

    def test_no_returns_is_empty(self):
        assert parse_return_type([]) == ""

    def test_named_return_renders_name(self):
        assert parse_return_type([FakeParameter(UINT, "shares")]) == "returns (shares)"

    def test_mixed_returns(self):
        params = [FakeParameter(UINT), FakeParameter(ElementaryTypeName("bool"), "ok")]
        assert parse_return_type(params) == "returns (uint256, ok)"
