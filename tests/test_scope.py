"""Unit tests for scope extension and path lookup."""

from dataclasses import dataclass

from replaceit.scope import extend, get_path, is_sequence


@dataclass
class Account:
    owner: str
    _secret: str = "hidden"


class TestExtend:
    """Tests for extend()."""

    def test_overrides_win(self):
        """Test that child bindings shadow parent bindings."""
        child = extend({"name": "Faiz", "tier": "gold"}, {"name": "Item A"})
        assert child == {"name": "Item A", "tier": "gold"}

    def test_inputs_not_mutated(self):
        """Test that neither the parent nor the overrides are modified."""
        parent = {"a": 1}
        overrides = {"b": 2}
        child = extend(parent, overrides)
        child["c"] = 3
        assert parent == {"a": 1}
        assert overrides == {"b": 2}

    def test_returns_new_dict(self):
        """Test that an empty extension still returns a copy."""
        parent = {"a": 1}
        assert extend(parent, {}) is not parent


class TestGetPath:
    """Tests for get_path()."""

    def test_nested_mapping(self):
        """Test resolving a dotted path through nested dicts."""
        assert get_path({"user": {"address": {"city": "Jakarta"}}}, "user.address.city") == "Jakarta"

    def test_missing_segment(self):
        """Test that a missing key short-circuits to None."""
        assert get_path({"user": {}}, "user.name") is None
        assert get_path({"user": {}}, "user.name.first") is None

    def test_scalar_intermediate(self):
        """Test that descending into a scalar yields None instead of failing."""
        assert get_path({"user": {"name": "Faiz"}}, "user.name.length") is None
        assert get_path({"count": 3}, "count.real") is None

    def test_sequence_index(self):
        """Test integer segments index into lists."""
        data = {"items": [{"name": "A"}, {"name": "B"}]}
        assert get_path(data, "items.1.name") == "B"
        assert get_path(data, "items.5.name") is None
        assert get_path(data, "items.first") is None

    def test_object_attribute(self):
        """Test public attributes of plain objects are resolved."""
        data = {"account": Account(owner="Faiz")}
        assert get_path(data, "account.owner") == "Faiz"
        assert get_path(data, "account._secret") is None

    def test_whitespace_and_empty_path(self):
        """Test surrounding whitespace is ignored and empty paths are absent."""
        assert get_path({"a": {"b": 1}}, "  a.b  ") == 1
        assert get_path({"a": 1}, "") is None
        assert get_path({"a": 1}, "a..b") is None

    def test_falsy_values_preserved(self):
        """Test that falsy values at the end of a path are returned as-is."""
        data = {"flags": {"zero": 0, "empty": "", "off": False}}
        assert get_path(data, "flags.zero") == 0
        assert get_path(data, "flags.empty") == ""
        assert get_path(data, "flags.off") is False


class TestIsSequence:
    """Tests for is_sequence()."""

    def test_lists_and_tuples(self):
        """Test lists and tuples are iterable targets."""
        assert is_sequence([1, 2])
        assert is_sequence(())

    def test_non_sequences(self):
        """Test strings, mappings and scalars are not."""
        assert not is_sequence("abc")
        assert not is_sequence({"a": 1})
        assert not is_sequence(None)
        assert not is_sequence(5)
