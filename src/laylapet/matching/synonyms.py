"""Bilingual (Turkish/English) ingredient and material synonyms.

Each family lists every known spelling of one ingredient: the Turkish
word, its ASCII-folded spelling, common derived forms ("tavuklu",
"tavuğu") and the English equivalents. Lookups are symmetric: any member
of a family expands to the whole family.
"""

from typing import Iterable


SYNONYM_FAMILIES = {
    "chicken": ["tavuk", "tavuklu", "tavuğu", "tavugu", "piliç", "pilic", "chicken", "poultry"],
    "turkey": ["hindi", "hindili", "turkey"],
    "duck": ["ördek", "ordek", "ördekli", "ordekli", "duck"],
    "beef": ["sığır", "sigir", "sığır eti", "dana", "dana eti", "beef"],
    "lamb": ["kuzu", "kuzulu", "kuzu eti", "lamb"],
    "fish": ["balık", "balik", "balıklı", "balikli", "fish"],
    "salmon": ["somon", "somonlu", "salmon"],
    "tuna": ["ton balığı", "ton baligi", "tuna"],
    "egg": ["yumurta", "yumurtalı", "yumurtali", "egg"],
    "dairy": ["süt", "sut", "sütlü", "sutlu", "laktoz", "milk", "dairy", "lactose"],
    "grain": ["tahıl", "tahil", "tahıllı", "tahilli", "grain", "cereal"],
    "wheat": ["buğday", "bugday", "wheat"],
    "corn": ["mısır", "misir", "corn", "maize"],
    "gluten": ["gluten", "glüten", "glutenli"],
    "soy": ["soya", "soy"],
    "fat": ["yağ", "yag", "yağlı", "yagli", "fat"],
    "sugar": ["şeker", "seker", "şekerli", "sekerli", "sugar"],
    "salt": ["tuz", "tuzlu", "salt"],
    "fragrance": ["parfüm", "parfum", "koku", "kokulu", "perfume", "fragrance", "scent"],
    "paraben": ["paraben", "parabenli"],
    "alcohol": ["alkol", "alkollü", "alkollu", "alcohol"],
    "plastic": ["plastik", "plastic"],
}


def _build_index(families: dict[str, list[str]]) -> dict[str, frozenset[str]]:
    index: dict[str, set[str]] = {}
    for members in families.values():
        family = {m.lower() for m in members}
        for member in family:
            # A term listed in two families expands to both
            index.setdefault(member, set()).update(family)
    return {term: frozenset(group) for term, group in index.items()}


_SYNONYM_INDEX = _build_index(SYNONYM_FAMILIES)


def expand(term: str) -> set[str]:
    """Return every known equivalent of a term, including the term itself.

    Args:
        term: Ingredient or material word (any case)

    Returns:
        The term's synonym family, or an empty set for unknown terms
    """
    if not term:
        return set()
    return set(_SYNONYM_INDEX.get(term.strip().lower(), ()))


def expand_all(terms: Iterable[str]) -> set[str]:
    """Expand a set of terms, keeping unknown terms as they are.

    Expansion is a closure: ``expand_all(expand_all(x)) == expand_all(x)``.
    """
    result: set[str] = set()
    for term in terms:
        normalized = term.strip().lower()
        if not normalized:
            continue
        result.add(normalized)
        result.update(expand(normalized))
    return result
