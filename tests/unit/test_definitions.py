"""
Unit tests for the glossary index.
"""

from src.curriculum.definitions import DefinitionIndex


class TestDefinitionIndex:
    """Tests for DefinitionIndex normalization and lookup."""

    def test_lookup_is_case_insensitive(self):
        """Lookup should ignore case on both sides."""
        index = DefinitionIndex({"Firewall": "Filters traffic."})

        assert index.lookup("firewall") == "Filters traffic."
        assert index.lookup("FIREWALL") == "Filters traffic."
        assert "FireWall" in index

    def test_unknown_term_returns_none(self):
        index = DefinitionIndex({"firewall": "Filters traffic."})

        assert index.lookup("router") is None
        assert "router" not in index

    def test_non_string_lookup_returns_none(self):
        index = DefinitionIndex({"firewall": "Filters traffic."})

        assert index.lookup(None) is None
        assert 42 not in index

    def test_all_terms_longest_first(self):
        """Longer terms must be offered before their substrings."""
        index = DefinitionIndex({"control": "c", "access control": "ac", "mfa": "m"})

        assert index.all_terms() == ("access control", "control", "mfa")

    def test_equal_length_terms_keep_glossary_order(self):
        index = DefinitionIndex({"beta": "b", "alfa": "a", "xy": "x"})

        assert index.all_terms() == ("beta", "alfa", "xy")

    def test_case_duplicates_keep_first(self):
        """When two raw terms differ only by case the first one wins."""
        index = DefinitionIndex({"VPN": "first", "vpn": "second"})

        assert len(index) == 1
        assert index.lookup("vpn") == "first"

    def test_blank_terms_are_dropped(self):
        index = DefinitionIndex({"  ": "nothing", "ids": "Intrusion detection."})

        assert index.all_terms() == ("ids",)

    def test_empty_index(self):
        index = DefinitionIndex()

        assert len(index) == 0
        assert index.all_terms() == ()
        assert index.to_dict() == {}

    def test_to_dict_uses_normalized_keys(self):
        index = DefinitionIndex({"Zero Trust": "Never trust, always verify."})

        assert index.to_dict() == {"zero trust": "Never trust, always verify."}
