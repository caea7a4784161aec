"""Identity resolution for scattered web evidence about a named individual.

The package turns raw documents (page text plus a source URL) into ranked
person clusters: evidence is normalized into typed tokens, vectorized with
TF-IDF, grouped by a density clusterer and resolved into entities with a
canonical handle per platform.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
