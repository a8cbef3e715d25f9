"""Tests for field path parsing and access."""

import pytest

from xrcompose.utils import fieldpath
from xrcompose.utils.errors import FieldNotFoundError, FieldPathError


class TestParse:
    """Tests for fieldpath.parse."""

    def test_dotted_fields(self) -> None:
        """Test plain dotted field names."""
        assert fieldpath.parse("spec.forProvider.region") == ["spec", "forProvider", "region"]

    def test_array_index(self) -> None:
        """Test bracketed digits become array indexes."""
        assert fieldpath.parse("spec.containers[0].name") == ["spec", "containers", 0, "name"]

    def test_bracketed_field_with_dots(self) -> None:
        """Test bracketed field names may contain dots and slashes."""
        assert fieldpath.parse("metadata.labels[crossplane.io/composite]") == [
            "metadata",
            "labels",
            "crossplane.io/composite",
        ]

    def test_quoted_bracketed_field(self) -> None:
        """Test quotes around bracketed field names are stripped."""
        assert fieldpath.parse("metadata.annotations['a.b']") == ["metadata", "annotations", "a.b"]
        assert fieldpath.parse('data["key"]') == ["data", "key"]

    def test_consecutive_brackets(self) -> None:
        """Test nested array indexes."""
        assert fieldpath.parse("matrix[1][2]") == ["matrix", 1, 2]

    @pytest.mark.parametrize(
        "path",
        ["", ".spec", "spec..name", "spec.", "spec[0", "spec]", "spec[]", "spec[0]name"],
    )
    def test_malformed(self, path: str) -> None:
        """Test malformed paths are rejected."""
        with pytest.raises(FieldPathError):
            fieldpath.parse(path)


class TestGetValue:
    """Tests for reading values by field path."""

    @pytest.fixture
    def obj(self) -> dict:
        return {
            "spec": {"tags": [{"key": "env", "value": "prod"}], "replicas": 3, "enabled": True},
            "metadata": {"labels": {"crossplane.io/composite": "ola"}},
        }

    def test_get_nested(self, obj: dict) -> None:
        """Test reading nested values."""
        assert fieldpath.get_value(obj, "spec.tags[0].value") == "prod"
        assert fieldpath.get_value(obj, "metadata.labels[crossplane.io/composite]") == "ola"

    def test_missing_field(self, obj: dict) -> None:
        """Test absent fields raise FieldNotFoundError."""
        with pytest.raises(FieldNotFoundError):
            fieldpath.get_value(obj, "spec.missing")

    def test_index_out_of_range(self, obj: dict) -> None:
        """Test out-of-range indexes count as not found."""
        with pytest.raises(FieldNotFoundError):
            fieldpath.get_value(obj, "spec.tags[5]")

    def test_traverse_scalar(self, obj: dict) -> None:
        """Test traversing into a scalar is an error, not a missing field."""
        with pytest.raises(FieldPathError) as exc_info:
            fieldpath.get_value(obj, "spec.replicas.value")
        assert not isinstance(exc_info.value, FieldNotFoundError)

    def test_typed_getters(self, obj: dict) -> None:
        """Test typed getters check the value type."""
        assert fieldpath.get_integer(obj, "spec.replicas") == 3
        assert fieldpath.get_bool(obj, "spec.enabled") is True
        assert fieldpath.get_string(obj, "spec.tags[0].key") == "env"
        with pytest.raises(FieldPathError):
            fieldpath.get_string(obj, "spec.replicas")
        with pytest.raises(FieldPathError):
            fieldpath.get_integer(obj, "spec.enabled")


class TestSetValue:
    """Tests for writing values by field path."""

    def test_creates_intermediate_objects(self) -> None:
        """Test missing objects along the path are created."""
        obj: dict = {}
        fieldpath.set_value(obj, "spec.forProvider.region", "eu-west-1")
        assert obj == {"spec": {"forProvider": {"region": "eu-west-1"}}}

    def test_creates_and_pads_arrays(self) -> None:
        """Test arrays are created and padded up to the index."""
        obj: dict = {}
        fieldpath.set_value(obj, "spec.tags[1].key", "env")
        assert obj == {"spec": {"tags": [None, {"key": "env"}]}}

    def test_overwrites_existing(self) -> None:
        """Test existing values are replaced."""
        obj = {"spec": {"size": "small"}}
        fieldpath.set_value(obj, "spec.size", "large")
        assert obj["spec"]["size"] == "large"

    def test_value_is_copied(self) -> None:
        """Test the stored value does not alias the source."""
        value = {"a": 1}
        obj: dict = {}
        fieldpath.set_value(obj, "spec.v", value)
        value["a"] = 2
        assert obj["spec"]["v"] == {"a": 1}

    def test_set_through_scalar(self) -> None:
        """Test setting below a scalar fails."""
        obj = {"spec": "scalar"}
        with pytest.raises(FieldPathError):
            fieldpath.set_value(obj, "spec.name", "x")
