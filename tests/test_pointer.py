import pytest
from pydantic import ValidationError

from api_lint.core.pointer import ROOT, JsonPointer


class TestJsonPointer:
    def test_root_renders_empty(self):
        assert str(ROOT) == ""
        assert ROOT.tokens == ()

    def test_path_segment_is_escaped(self):
        pointer = ROOT.plus("paths", "/things", "get")
        assert str(pointer) == "/paths/~1things/get"

    def test_tilde_is_escaped_before_slash(self):
        assert str(ROOT.plus("a~b/c")) == "/a~0b~1c"

    def test_parse_is_inverse_of_str(self):
        pointer = JsonPointer.parse("/paths/~1pets~1{id}/get/responses/200")
        assert pointer.tokens == ("paths", "/pets/{id}", "get", "responses", "200")
        assert str(pointer) == "/paths/~1pets~1{id}/get/responses/200"

    def test_parse_empty_is_root(self):
        assert JsonPointer.parse("") == ROOT

    def test_parse_requires_leading_slash(self):
        with pytest.raises(ValueError):
            JsonPointer.parse("paths/x")

    def test_plus_copies(self):
        base = ROOT.plus("paths")
        extended = base.plus("/pets", 0)
        assert base.tokens == ("paths",)
        assert extended.tokens == ("paths", "/pets", "0")

    def test_equal_tokens_are_equal_and_hash_equal(self):
        a = ROOT.plus("paths", "/pets")
        b = JsonPointer(tokens=("paths", "/pets"))
        assert a == b
        assert len({a, b}) == 1

    def test_parent(self):
        assert ROOT.plus("paths", "/pets", "get").parent == ROOT.plus("paths", "/pets")

    def test_is_immutable(self):
        pointer = ROOT.plus("paths")
        with pytest.raises(ValidationError):
            pointer.tokens = ("other",)
