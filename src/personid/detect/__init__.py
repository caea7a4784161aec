"""Evidence extractors turning document text into typed tokens."""

from .base import EvidenceToken, ExtractionContext, Extractor, TokenType
from .domains import DomainExtractor
from .email import EmailExtractor
from .handles import HandleExtractor
from .keywords import KeywordExtractor
from .locations import LocationExtractor
from .names import NameExtractor
from .organizations import OrganizationExtractor
from .phone import PhoneExtractor
from .urls import UrlExtractor
from .years import YearExtractor


def default_extractors() -> list[Extractor]:
    """Return one instance of every built-in extractor in evaluation order."""

    return [
        NameExtractor(),
        EmailExtractor(),
        PhoneExtractor(),
        LocationExtractor(),
        OrganizationExtractor(),
        DomainExtractor(),
        HandleExtractor(),
        YearExtractor(),
        UrlExtractor(),
        KeywordExtractor(),
    ]


__all__ = [
    "EvidenceToken",
    "ExtractionContext",
    "Extractor",
    "TokenType",
    "DomainExtractor",
    "EmailExtractor",
    "HandleExtractor",
    "KeywordExtractor",
    "LocationExtractor",
    "NameExtractor",
    "OrganizationExtractor",
    "PhoneExtractor",
    "UrlExtractor",
    "YearExtractor",
    "default_extractors",
]
