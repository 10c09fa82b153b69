"""Static allergen lexicon mapping allergens to the terms that imply them."""

from dataclasses import dataclass
from types import MappingProxyType

ALLERGEN_GROUPS: dict[str, tuple[str, ...]] = {
    "peanut": ("peanut", "groundnut", "peanut butter", "peanut oil", "arachis"),
    "tree_nut": (
        "almond",
        "cashew",
        "walnut",
        "pecan",
        "pistachio",
        "hazelnut",
        "macadamia",
        "brazil nut",
        "chestnut",
        "pine nut",
        "praline",
        "marzipan",
    ),
    "dairy": (
        "milk",
        "cheese",
        "yogurt",
        "yoghurt",
        "butter",
        "cream",
        "ghee",
        "paneer",
        "whey",
        "casein",
        "lactose",
        "curd",
        "dahi",
        "lassi",
        "raita",
        "khoa",
    ),
    "egg": ("egg", "albumin", "mayonnaise", "meringue", "omelette", "omelet"),
    "soy": ("soy", "soya", "tofu", "tempeh", "edamame", "miso", "soy sauce"),
    "gluten": (
        "wheat",
        "barley",
        "rye",
        "gluten",
        "semolina",
        "couscous",
        "seitan",
        "bread",
        "pasta",
        "roti",
        "chapati",
        "naan",
    ),
    "shellfish": (
        "shrimp",
        "prawn",
        "crab",
        "lobster",
        "oyster",
        "clam",
        "mussel",
        "scallop",
    ),
    "fish": (
        "fish",
        "salmon",
        "tuna",
        "cod",
        "tilapia",
        "sardine",
        "anchovy",
        "mackerel",
        "trout",
    ),
    "sesame": ("sesame", "tahini", "sesame oil", "sesame seeds"),
    "mustard": ("mustard", "mustard oil", "mustard seeds"),
}

# Declared names that refer to a lexicon group under another spelling.
ALLERGEN_SYNONYMS: dict[str, str] = {
    "peanuts": "peanut",
    "groundnuts": "peanut",
    "nuts": "tree_nut",
    "tree nut": "tree_nut",
    "tree nuts": "tree_nut",
    "tree-nut": "tree_nut",
    "milk": "dairy",
    "lactose": "dairy",
    "eggs": "egg",
    "wheat": "gluten",
    "seafood": "shellfish",
    "soya": "soy",
    "soybean": "soy",
    "soybeans": "soy",
}


@dataclass(frozen=True)
class AllergenLexicon:
    """Lookup table from a canonical allergen to its alias set."""

    groups: MappingProxyType[str, frozenset[str]]
    synonyms: MappingProxyType[str, str]

    @classmethod
    def default(cls) -> "AllergenLexicon":
        """Build the lexicon from the bundled allergen groups."""
        return cls.from_groups(ALLERGEN_GROUPS, ALLERGEN_SYNONYMS)

    @classmethod
    def from_groups(
        cls,
        groups: dict[str, tuple[str, ...]],
        synonyms: dict[str, str] | None = None,
    ) -> "AllergenLexicon":
        """Build a lexicon from raw groups, normalizing every term once."""
        normalized = {
            _normalize(name): frozenset(_normalize(alias) for alias in aliases)
            for name, aliases in groups.items()
        }
        return cls(
            groups=MappingProxyType(normalized),
            synonyms=MappingProxyType(
                {_normalize(k): _normalize(v) for k, v in (synonyms or {}).items()}
            ),
        )

    def canonical(self, allergen: str) -> str:
        """Return the lexicon key for a declared allergen, or the cleaned name."""
        cleaned = _normalize(allergen)
        if cleaned in self.groups:
            return cleaned
        if cleaned in self.synonyms:
            return self.synonyms[cleaned]
        underscored = cleaned.replace(" ", "_")
        if underscored in self.groups:
            return underscored
        return cleaned

    def aliases(self, allergen: str) -> frozenset[str]:
        """Return every term implying the allergen, including its own name."""
        cleaned = _normalize(allergen)
        canonical = self.canonical(allergen)
        terms = set(self.groups.get(canonical, frozenset()))
        terms.add(cleaned)
        if "_" not in canonical:
            terms.add(canonical)
        if cleaned.endswith("s") and len(cleaned) > 3:
            terms.add(cleaned[:-1])
        return frozenset(term for term in terms if term)

    def describe(self, allergen: str) -> str:
        """Format an allergen with its aliases for prompt display."""
        aliases = sorted(self.aliases(allergen))
        return f"{allergen.upper()} (including: {', '.join(aliases)})"


def _normalize(term: str) -> str:
    return " ".join(term.strip().lower().split())
