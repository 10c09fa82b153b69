"""Tests for the allergen lexicon."""

from fit_planner.services.allergens import AllergenLexicon


def test_synonym_resolves_to_group(lexicon: AllergenLexicon) -> None:
    assert lexicon.canonical("Peanuts") == "peanut"
    assert lexicon.canonical("milk") == "dairy"
    assert lexicon.canonical("tree nuts") == "tree_nut"


def test_aliases_include_declared_name_and_group(lexicon: AllergenLexicon) -> None:
    aliases = lexicon.aliases("dairy")

    assert {"dairy", "paneer", "ghee", "whey", "butter"} <= aliases


def test_aliases_for_plural_declaration(lexicon: AllergenLexicon) -> None:
    aliases = lexicon.aliases("peanuts")

    assert {"peanuts", "peanut", "peanut butter", "groundnut"} <= aliases


def test_unknown_allergen_matches_itself(lexicon: AllergenLexicon) -> None:
    assert lexicon.canonical("Kiwi") == "kiwi"
    assert lexicon.aliases("kiwi") == frozenset({"kiwi"})


def test_describe_lists_aliases(lexicon: AllergenLexicon) -> None:
    description = lexicon.describe("egg")

    assert description.startswith("EGG (including: ")
    assert "mayonnaise" in description


def test_custom_groups_are_normalized() -> None:
    lexicon = AllergenLexicon.from_groups({" Lupin ": ("Lupin Flour", "LUPINE")})

    assert lexicon.aliases("lupin") == frozenset({"lupin", "lupin flour", "lupine"})
