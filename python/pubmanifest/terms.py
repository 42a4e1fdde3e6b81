"""Term taxonomy: per node kind classification of property names.

Every manifest-family node kind has one TermTaxonomy. It partitions the
property names the kind knows about into value-shape categories, and the
normalizer and validator dispatch on those categories. A property that is
in no category is unknown for the kind and passes through untouched.

The partitions are disjoint; a taxonomy refuses to be built otherwise.
"""

from dataclasses import dataclass, field, fields

_EMPTY: frozenset[str] = frozenset()


@dataclass(frozen=True)
class TermTaxonomy:
    """Classification of the property names of one node kind.

    Attributes:
        single_literal: Plain string values
        array_of_literals: Lists of plain strings
        single_string: One localizable string
        array_of_strings: Lists of localizable strings
        array_of_entities: Lists of Person/Organization entities
        array_of_links: Lists of linked resources
        single_url: One absolute URL
        array_of_urls: Lists of absolute URLs
        single_boolean: Booleans
        single_number: Numbers
        single_misc: Values with no generic shape check
        array_of_miscs: Lists with no generic shape check
    """

    single_literal: frozenset[str] = _EMPTY
    array_of_literals: frozenset[str] = _EMPTY
    single_string: frozenset[str] = _EMPTY
    array_of_strings: frozenset[str] = _EMPTY
    array_of_entities: frozenset[str] = _EMPTY
    array_of_links: frozenset[str] = _EMPTY
    single_url: frozenset[str] = _EMPTY
    array_of_urls: frozenset[str] = _EMPTY
    single_boolean: frozenset[str] = _EMPTY
    single_number: frozenset[str] = _EMPTY
    single_misc: frozenset[str] = _EMPTY
    array_of_miscs: frozenset[str] = _EMPTY
    all_terms: frozenset[str] = field(init=False)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for category in fields(self):
            if category.name == "all_terms":
                continue
            terms = getattr(self, category.name)
            overlap = seen & terms
            if overlap:
                raise ValueError(f"Terms classified twice: {sorted(overlap)}")
            seen |= terms
        object.__setattr__(self, "all_terms", frozenset(seen))

    def is_array_term(self, term: str) -> bool:
        return (
            term in self.array_of_literals
            or term in self.array_of_strings
            or term in self.array_of_entities
            or term in self.array_of_links
            or term in self.array_of_urls
            or term in self.array_of_miscs
        )

    def is_entities_term(self, term: str) -> bool:
        return term in self.array_of_entities

    def is_strings_term(self, term: str) -> bool:
        return term in self.array_of_strings

    def is_single_string_term(self, term: str) -> bool:
        return term in self.single_string

    def is_links_term(self, term: str) -> bool:
        return term in self.array_of_links

    def is_single_url_term(self, term: str) -> bool:
        return term in self.single_url

    def is_urls_term(self, term: str) -> bool:
        return term in self.array_of_urls

    def is_literal_or_literals_term(self, term: str) -> bool:
        return term in self.single_literal or term in self.array_of_literals

    def is_url_or_urls_term(self, term: str) -> bool:
        return term in self.single_url or term in self.array_of_urls

    def is_single_boolean_term(self, term: str) -> bool:
        return term in self.single_boolean

    def is_single_number_term(self, term: str) -> bool:
        return term in self.single_number

    def is_regular_term(self, term: str) -> bool:
        """Known term whose value shape can be checked generically (everything but the miscs)."""
        return (
            term in self.all_terms
            and term not in self.single_misc
            and term not in self.array_of_miscs
        )

    def is_valid_term(self, term: str) -> bool:
        return term in self.all_terms


ENTITY_TERMS = TermTaxonomy(
    array_of_literals=frozenset({"type", "identifier"}),
    array_of_strings=frozenset({"name"}),
    single_url=frozenset({"id", "url"}),
)

LOCALIZABLE_STRING_TERMS = TermTaxonomy(
    single_literal=frozenset({"value", "language", "direction"}),
)

LINKED_RESOURCE_TERMS = TermTaxonomy(
    single_literal=frozenset({"encodingFormat", "integrity", "duration"}),
    array_of_literals=frozenset({"rel", "type"}),
    single_string=frozenset({"description"}),
    array_of_strings=frozenset({"name"}),
    array_of_links=frozenset({"alternate"}),
    single_url=frozenset({"url"}),
    single_number=frozenset({"length"}),
)

# Creator roles, all of which hold entities
CREATOR_ROLES = frozenset(
    {
        "artist",
        "author",
        "colorist",
        "contributor",
        "creator",
        "editor",
        "illustrator",
        "inker",
        "letterer",
        "penciler",
        "publisher",
        "readBy",
        "translator",
    }
)

MANIFEST_TERMS = TermTaxonomy(
    single_literal=frozenset({"dateModified", "datePublished", "readingProgression", "duration"}),
    array_of_literals=frozenset(
        {
            "accessMode",
            "accessibilityFeature",
            "accessibilityHazard",
            "inLanguage",
            "type",
            "conformsTo",
        }
    ),
    array_of_strings=frozenset({"name", "accessibilitySummary"}),
    array_of_entities=CREATOR_ROLES,
    array_of_links=frozenset({"readingOrder", "resources", "links"}),
    single_url=frozenset({"id"}),
    array_of_urls=frozenset({"url"}),
    single_boolean=frozenset({"abridged"}),
    array_of_miscs=frozenset({"accessModeSufficient"}),
)
