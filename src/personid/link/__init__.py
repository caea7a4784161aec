"""Entity resolution and aggregation.

:mod:`personid.link.matching` scores document pairs,
:mod:`personid.link.entity_resolver` turns the scored graph into entity
clusters with canonical handles and :mod:`personid.link.aggregate` folds the
density clustering into a ranked list of persons.
"""

from .aggregate import AggregationResult, EnhancedProfile, PersonCluster, aggregate
from .entity_resolver import (
    AlternateHandle,
    ElectedHandle,
    EntityCluster,
    EntityEdge,
    EntityResolver,
    resolve,
)
from .matching import EntityNode, MatchResult, score_match
from .multi_account import MultiAccountPolicy

__all__ = [
    "AggregationResult",
    "AlternateHandle",
    "ElectedHandle",
    "EnhancedProfile",
    "EntityCluster",
    "EntityEdge",
    "EntityNode",
    "EntityResolver",
    "MatchResult",
    "MultiAccountPolicy",
    "PersonCluster",
    "aggregate",
    "resolve",
    "score_match",
]
