"""Intent extraction for free-text customer messages.

This module turns a Turkish or English shopping message into a
:class:`SearchIntent`:
1. Detect the target species and product category
2. Detect ingredients the customer wants to avoid ("tavuksuz",
   "without chicken", "az yağlı") and expand them through the synonym table
3. Collect life-stage and health modifiers (senior, kitten, urinary, ...)
4. Keep the remaining meaningful words as brand keyword candidates

All detection is keyword matching on the lowercased message. A keyword can
match inside a longer word ("cat" in "catalog"); this is accepted.
"""

import re
from typing import Optional

import structlog

from laylapet.matching.synonyms import expand, expand_all
from laylapet.state.models import SearchIntent

logger = structlog.get_logger()


def normalize_text(text) -> str:
    """Lowercase text, folding the Turkish dotted capital I first."""
    if not text:
        return ""
    return str(text).replace("İ", "i").lower()


def _dedupe(items) -> tuple[str, ...]:
    return tuple(dict.fromkeys(items))


# ============================================================================
# Species
# ============================================================================

# Checked in order; the first species with a matching keyword wins
SPECIES = {
    "cat": ["kedi", "kitten", "cat"],
    "dog": ["köpek", "köpeğ", "kopek", "kopeg", "puppy", "dog"],
    "bird": ["kuş", "kus", "muhabbet", "papağan", "papagan", "bird"],
    "fish": ["balık", "balik", "akvaryum", "fish"],
}


def detect_species(text: str) -> Optional[str]:
    """Return the first species whose keyword appears in the text."""
    for species, keywords in SPECIES.items():
        if any(keyword in text for keyword in keywords):
            return species
    return None


# ============================================================================
# Category
# ============================================================================

# Priority order: the first rule with a matching keyword wins
CATEGORIES = {
    "treat": ["ödül", "odul", "treat", "snack", "kemik", "stick"],
    "hygiene": ["kum", "litter", "çiş pedi", "cis pedi", "pad", "hijyen", "tuvalet"],
    "grooming": [
        "şampuan", "sampuan", "shampoo", "krem", "cream", "tarak", "comb",
        "fırça", "firca", "brush", "bakım", "bakim", "grooming",
    ],
    "toy": ["oyuncak", "toy", "olta", "tünel", "tunel"],
    "accessory": [
        "tasma", "leash", "collar", "mama kabı", "mama kabi", "su kabı", "su kabi",
        "taşıma", "tasima", "carrier", "yatak", "aksesuar",
    ],
    "food": ["mama", "food", "yem"],
}

# Sub-keywords that seed free-text hints when their category wins
CATEGORY_HINTS = {
    "grooming": [
        (["şampuan", "sampuan", "shampoo"], ["şampuan", "shampoo"]),
        (["krem", "cream"], ["krem", "cream"]),
        (["tarak", "comb", "fırça", "firca", "brush"], ["tarak", "comb", "fırça"]),
    ],
    "hygiene": [
        (["kum", "litter"], ["kum", "litter"]),
        (["çiş pedi", "cis pedi", "pad"], ["çiş pedi", "pad"]),
    ],
}


def detect_category(text: str) -> tuple[Optional[str], tuple[str, ...]]:
    """Detect the product category and the hints it implies.

    Returns:
        Tuple of (category or None, free-text hints)
    """
    for category, keywords in CATEGORIES.items():
        if not any(keyword in text for keyword in keywords):
            continue
        hints: list[str] = []
        for triggers, seeded in CATEGORY_HINTS.get(category, []):
            if any(trigger in text for trigger in triggers):
                hints.extend(seeded)
        return category, _dedupe(hints)
    return None, ()


# ============================================================================
# Life stage and health modifiers
# ============================================================================

# Message keywords per canonical modifier. "senior" and "wet" are resolved
# together: "yaş" (wet) is a prefix of "yaşlı" (old), so senior wins.
MODIFIERS = {
    "sterilised": [
        "kısırlaştırılmış", "kisirlastirilmis", "kısır", "kisir",
        "sterilised", "sterilized", "neutered", "spayed",
    ],
    "grain_free": ["tahılsız", "tahilsiz", "grain-free", "grain free"],
    "senior": ["yaşlı", "yasli", "senior", "mature", "7+"],
    "wet": ["yaş mama", "yas mama", "yaş", "konserve", "pouch", "wet food", "wet"],
    "dry": ["kuru mama", "kuru", "dry", "kibble"],
    "sensitive": ["hassas", "sensitive"],
    "adult": ["yetişkin", "yetiskin", "adult"],
    "junior": ["yavru", "kitten", "puppy", "junior"],
    "renal": ["böbrek", "bobrek", "renal", "kidney"],
    "urinary": ["idrar", "üriner", "uriner", "urinary", "struvit"],
    "weight_control": ["kilo", "diyet", "obez", "light", "weight"],
    "skin_coat": ["tüy", "tuy", "deri", "skin", "coat", "hairball"],
}

# Catalog wording for each modifier, used by the scorer
MODIFIER_MATCH_TERMS = {
    "sterilised": ["kısırlaştırılmış", "kisirlastirilmis", "sterilised", "sterilized", "neutered"],
    "grain_free": ["tahılsız", "tahilsiz", "grain free", "grain-free"],
    "senior": ["yaşlı", "yasli", "senior", "mature", "7+"],
    "wet": ["yaş mama", "yas mama", "konserve", "pouch", "wet"],
    "dry": ["kuru", "dry", "kibble"],
    "sensitive": ["hassas", "sensitive"],
    "adult": ["yetişkin", "yetiskin", "adult"],
    "junior": ["yavru", "kitten", "puppy", "junior"],
    "renal": ["böbrek", "bobrek", "renal", "kidney"],
    "urinary": ["idrar", "üriner", "uriner", "urinary"],
    "weight_control": ["kilo", "diyet", "light", "weight"],
    "skin_coat": ["tüy", "tuy", "deri", "skin", "coat", "hairball"],
}

AGE_PATTERN = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(ay(?:lık|lik)?(?!\w)|months?|yaş|yas|yıl|yil|years?|yrs?)"
)


def infer_life_stage(text: str) -> Optional[str]:
    """Map "<number> <unit>" phrases such as "8 aylık" or "9 yaşında" to a life stage."""
    match = AGE_PATTERN.search(text)
    if not match:
        return None
    age = float(match.group(1).replace(",", "."))
    unit = match.group(2)
    if unit.startswith(("ay", "month")) or age < 1:
        return "junior"
    if age >= 7:
        return "senior"
    return "adult"


def detect_modifiers(text: str) -> tuple[str, ...]:
    """Collect life-stage and health modifiers, numeric age first."""
    found: list[str] = []

    stage = infer_life_stage(text)
    if stage:
        found.append(stage)

    # Age phrases ("3 yaşında") must not trigger the wet-food keyword
    keyword_text = AGE_PATTERN.sub(" ", text)

    def has(name: str) -> bool:
        return any(keyword in keyword_text for keyword in MODIFIERS[name])

    if has("sterilised"):
        found.append("sterilised")
    if has("grain_free"):
        found.append("grain_free")

    if has("senior") or "senior" in found:
        found.append("senior")
    elif has("wet"):
        found.append("wet")

    for name in ("dry", "sensitive", "adult", "junior", "renal", "urinary", "weight_control", "skin_coat"):
        if has(name):
            found.append(name)

    return _dedupe(found)


# ============================================================================
# Exclusions
# ============================================================================

NEGATION_SUFFIX_PATTERN = re.compile(r"\b(\w{3,}?)(?:sız|siz|suz|süz)\b")
FREE_SUFFIX_PATTERN = re.compile(r"\b(\w{3,})[- ]free\b")

POSTFIX_NEGATIONS = [
    "olmasın", "olmasin", "olmayan", "olmadan", "içermeyen", "icermeyen",
    "içermesin", "icermesin", "içermez", "icermez", "hariç", "haric",
    "istemiyorum", "istemiyoruz", "yok", "değil", "degil",
]
PREFIX_NEGATIONS = [
    "without", "excluding", "except", "no", "not",
    "don't want", "dont want", "do not want",
]
QUANTITY_WORDS = ["az", "düşük", "dusuk", "minimum", "low", "less", "little"]


def _alternation(words: list[str]) -> str:
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


NEGATION_POSTFIX_PATTERN = re.compile(
    r"\b(\w{3,})\s+(?:" + _alternation(POSTFIX_NEGATIONS) + r")\b"
)
NEGATION_PREFIX_PATTERN = re.compile(
    r"\b(?:" + _alternation(PREFIX_NEGATIONS) + r")\s+(\w{3,})\b"
)
LOW_QUANTITY_PATTERN = re.compile(
    r"\b(?:" + _alternation(QUANTITY_WORDS) + r")\s+(\w{3,})\b"
)

# Well-known "free-from" phrases seed whole ingredient families
EXCLUSION_SHORTCUTS = [
    (["tahılsız", "tahilsiz", "grain-free", "grain free"], ["grain", "wheat", "corn"]),
    (["glutensiz", "gluten-free", "gluten free"], ["gluten"]),
    (
        ["laktozsuz", "sütsüz", "sutsuz", "dairy-free", "dairy free", "lactose-free", "lactose free"],
        ["dairy"],
    ),
]

STOPWORDS = {
    # Turkish
    "merhaba", "selam", "selamlar", "günaydın", "gunaydin", "iyi", "günler", "gunler",
    "akşamlar", "aksamlar", "için", "icin", "bir", "bana", "beni", "benim", "bizim",
    "bize", "var", "mı", "mi", "mu", "mü", "misin", "musun", "misiniz", "ne", "nedir",
    "neler", "nasıl", "nasil", "hangi", "hangisi", "öner", "oner", "önerir", "onerir",
    "önerin", "onerin", "öneri", "oneri", "tavsiye", "istiyorum", "istiyoruz", "lazım",
    "lazim", "arıyorum", "ariyorum", "bakıyorum", "bakiyorum", "olan", "olarak", "gibi",
    "daha", "çok", "cok", "en", "ve", "veya", "ile", "ama", "fakat", "de", "da", "ki",
    "bu", "şu", "o", "uygun", "ürün", "urun", "ürünü", "urunu", "ürünler", "urunler",
    "kaç", "kac", "fiyat", "fiyatı", "fiyati", "ucuz", "pahalı", "pahali", "güzel",
    "guzel", "kaliteli", "lütfen", "lutfen", "teşekkürler", "tesekkurler", "sahibiyim",
    "evde", "yeni", "içinde", "icinde", "olsun", "olabilir", "şey", "sey", "hiç", "hic",
    "ücret", "ucret", "sorun", "zahmet", "kusur", "sınır", "sinir",
    "aylık", "aylik", "yaşında", "yasinda", "yaşındaki", "yasindaki", "yıllık", "yillik",
    # English
    "the", "and", "for", "with", "want", "need", "looking", "recommend", "please",
    "hello", "some", "any", "what", "which", "best", "good", "cheap", "can", "you",
    "have", "that", "this", "like", "than", "from", "something", "product", "products",
    "too", "much", "many", "very", "more", "old", "year", "years", "month", "months",
}


def _vocabulary() -> tuple[str, ...]:
    words: set[str] = set()
    groups = list(SPECIES.values()) + list(CATEGORIES.values()) + list(MODIFIERS.values())
    for group in groups:
        for phrase in group:
            words.update(w for w in phrase.split() if len(w) >= 3)
    return tuple(sorted(words))


VOCABULARY = _vocabulary()


def is_vocabulary_token(token: str) -> bool:
    """True for species, category or modifier words, including inflected forms."""
    return any(token.startswith(word) for word in VOCABULARY)


def _accept_stem(stem: str) -> bool:
    if len(stem) < 3 or stem in STOPWORDS:
        return False
    if expand(stem):
        return True
    if is_vocabulary_token(stem):
        return False
    # Unknown short stems ("ses" from "sessiz") are more likely noise
    return len(stem) >= 4


def extract_exclusions(text: str) -> tuple[set[str], set[str]]:
    """Find ingredients the customer wants to avoid.

    Args:
        text: Normalized (lowercased) message

    Returns:
        Tuple of (expanded exclusion terms, message tokens that carried the negation)
    """
    stems: set[str] = set()
    negation_tokens: set[str] = set()

    for pattern in (
        NEGATION_SUFFIX_PATTERN,
        FREE_SUFFIX_PATTERN,
        NEGATION_POSTFIX_PATTERN,
        NEGATION_PREFIX_PATTERN,
        LOW_QUANTITY_PATTERN,
    ):
        for match in pattern.finditer(text):
            stem = match.group(1)
            if not _accept_stem(stem):
                continue
            stems.add(stem)
            negation_tokens.update(match.group(0).split())

    for phrases, seeds in EXCLUSION_SHORTCUTS:
        if any(phrase in text for phrase in phrases):
            stems.update(seeds)

    return expand_all(stems), negation_tokens


# ============================================================================
# Brand keywords
# ============================================================================

_TOKEN_STRIP = ".,!?;:()[]{}\"'“”‘’…/"


def tokenize(text: str) -> list[str]:
    """Split on whitespace and strip surrounding punctuation."""
    tokens = (token.strip(_TOKEN_STRIP) for token in text.split())
    return [token for token in tokens if token]


def extract_brand_keywords(
    text: str,
    negation_tokens: set[str],
    exclude_terms: set[str],
) -> tuple[str, ...]:
    """Keep the tokens that could name a brand or vendor.

    Drops short tokens, numbers, stopwords, species/category/modifier words,
    negation words and anything already excluded.
    """
    keywords = []
    for token in tokenize(text):
        if len(token) <= 2 or token.isdigit():
            continue
        if token in STOPWORDS or token in negation_tokens or token in exclude_terms:
            continue
        if is_vocabulary_token(token):
            continue
        keywords.append(token)
    return _dedupe(keywords)


# ============================================================================
# Entry point
# ============================================================================

def extract_intent(message: str) -> SearchIntent:
    """Parse a customer message into a search intent.

    Never raises: unrecognized messages produce an empty intent.

    Args:
        message: Raw customer message

    Returns:
        SearchIntent with every detected preference
    """
    text = normalize_text(message)

    exclude_terms, negation_tokens = extract_exclusions(text)

    # Species words inside a negation ("balıksız") do not name the pet
    species_text = " ".join(
        word for word in text.split() if word.strip(_TOKEN_STRIP) not in negation_tokens
    )

    category, hints = detect_category(text)

    intent = SearchIntent(
        species=detect_species(species_text),
        category=category,
        free_text_hints=hints,
        life_stage_or_health=detect_modifiers(text),
        brand_keywords=extract_brand_keywords(text, negation_tokens, exclude_terms),
        exclude_terms=tuple(sorted(exclude_terms)),
    )
    logger.debug("Intent extracted", **intent.summary())
    return intent
