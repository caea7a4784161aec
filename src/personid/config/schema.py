"""Typed configuration schema and loader for the personid package."""

from __future__ import annotations

import os
from collections.abc import Mapping
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, confloat, conint

from ..utils.constants import DOMAIN_KEYWORDS, MULTI_ACCOUNT_KEYWORDS

CONFIG_ENV_VAR = "PERSONID_CONFIG"

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class NormalizerSettings(BaseModel):
    """Evidence extraction thresholds and vocabularies."""

    min_name_confidence: confloat(ge=0.0, le=1.0) = 0.3
    min_email_confidence: confloat(ge=0.0, le=1.0) = 0.5
    name_blacklist: list[str] = ["admin", "user", "test", "sample", "demo", "example"]
    domain_keywords: list[str] = list(DOMAIN_KEYWORDS + MULTI_ACCOUNT_KEYWORDS)
    default_region: str = "US"
    current_year: conint(ge=1950) | None = None

    model_config = ConfigDict(extra="forbid")


class VectorizerSettings(BaseModel):
    """TF-IDF vocabulary and reduction options."""

    min_doc_freq: conint(ge=1) = 2
    max_doc_freq: confloat(gt=0.0, le=1.0) = 0.8
    use_unigrams: bool = True
    use_bigrams: bool = True
    target_components: conint(ge=1) = 200
    l2_normalize: bool = True
    reduction: Literal["svd", "truncate"] = "svd"

    model_config = ConfigDict(extra="forbid")


class ConsensusSettings(BaseModel):
    """Ensemble members and agreement thresholds for consensus clustering."""

    member_sizes: list[conint(ge=2)] = [4, 8, 12]
    agreement_threshold: confloat(ge=0.0, le=1.0) = 0.5
    min_confidence: confloat(ge=0.0, le=1.0) = 0.3
    include_kmeans: bool = True

    model_config = ConfigDict(extra="forbid")


class KMeansSettings(BaseModel):
    """Centroid clustering with silhouette driven choice of ``k``."""

    max_clusters: conint(ge=1) = 10
    n_init: conint(ge=1) = 4
    max_iterations: conint(ge=1) = 100
    min_silhouette: confloat(ge=-1.0, le=1.0) = 0.5
    seed: conint(ge=0) = 0

    model_config = ConfigDict(extra="forbid")


class ClusteringSettings(BaseModel):
    """Clustering parameters."""

    algorithm: Literal["hdbscan", "consensus", "kmeans"] = "hdbscan"
    min_cluster_size: conint(ge=2) = 12
    min_samples: conint(ge=1) | None = None
    metric: Literal["euclidean", "cosine"] = "euclidean"
    allow_single_cluster: bool = True
    consensus: ConsensusSettings = ConsensusSettings()
    kmeans: KMeansSettings = KMeansSettings()

    model_config = ConfigDict(extra="forbid")

    @property
    def effective_min_samples(self) -> int:
        """Return ``min_samples`` falling back to ``min_cluster_size``."""

        return self.min_samples if self.min_samples is not None else self.min_cluster_size


class MatchWeights(BaseModel):
    """Weights of the pairwise match signals."""

    vector: confloat(ge=0.0, le=1.0) = 0.4
    jaccard: confloat(ge=0.0, le=1.0) = 0.3
    handle: confloat(ge=0.0, le=1.0) = 0.3
    email: confloat(ge=0.0, le=1.0) = 0.4
    name: confloat(ge=0.0, le=1.0) = 0.2
    domain: confloat(ge=0.0, le=1.0) = 0.1
    context: confloat(ge=0.0, le=1.0) = 0.1

    model_config = ConfigDict(extra="forbid")


class MultiAccountSettings(BaseModel):
    """Policy for accepting several handles of one person on a platform."""

    enabled: bool = True
    keywords: list[str] = list(MULTI_ACCOUNT_KEYWORDS)

    model_config = ConfigDict(extra="forbid")


class ResolverSettings(BaseModel):
    """Entity resolution thresholds."""

    cosine_similarity_threshold: confloat(ge=0.0, le=1.0) = 0.3
    edge_confidence_threshold: confloat(ge=0.0, le=1.0) = 0.6
    jaccard_threshold: confloat(ge=0.0, le=1.0) = 0.3
    levenshtein_threshold: conint(ge=0) = 3
    handle_edit_distance: conint(ge=0) = 2
    weights: MatchWeights = MatchWeights()
    multi_account: MultiAccountSettings = MultiAccountSettings()

    model_config = ConfigDict(extra="forbid")


class AggregationSettings(BaseModel):
    """Cluster scoring adjustments applied before ranking."""

    outlier_ratio: confloat(ge=0.0, le=1.0) = 0.5
    outlier_penalty: confloat(ge=0.0, le=1.0) = 0.5
    confidence_floor: confloat(ge=0.0, le=1.0) = 0.3
    top_terms: conint(ge=0) = 10

    model_config = ConfigDict(extra="forbid")


class ConfigModel(BaseModel):
    """Top-level configuration model."""

    schema_version: conint(ge=1)
    normalizer: NormalizerSettings
    vectorizer: VectorizerSettings
    clustering: ClusteringSettings
    resolver: ResolverSettings
    aggregation: AggregationSettings

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Loader utilities
# ---------------------------------------------------------------------------


def deep_merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge mapping ``b`` onto ``a`` returning a new dict."""

    result: dict[str, Any] = dict(a)
    for key, b_val in b.items():
        if key in result and isinstance(result[key], dict) and isinstance(b_val, dict):
            result[key] = deep_merge_dicts(result[key], b_val)
        else:
            result[key] = b_val
    return result


def _read_yaml(path: str | os.PathLike[str]) -> dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"configuration file {path} must contain a mapping")
    return data


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ConfigModel:
    """Load configuration from defaults and optional user overrides.

    Precedence of sources: package ``defaults.yml`` < user-provided YAML.  When
    ``path`` is omitted the file named by the ``PERSONID_CONFIG`` environment
    variable is used instead, if set.
    """

    with (
        importlib_resources.files("personid.config")
        .joinpath("defaults.yml")
        .open("r", encoding="utf-8") as f
    ):
        defaults = yaml.safe_load(f) or {}

    environ = env if env is not None else os.environ
    if path is None and environ.get(CONFIG_ENV_VAR):
        path = environ[CONFIG_ENV_VAR]

    merged = deep_merge_dicts(defaults, _read_yaml(path)) if path is not None else defaults
    return ConfigModel.model_validate(merged)


def default_config() -> ConfigModel:
    """Return the package defaults ignoring the environment."""

    return load_config(env={})


__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigModel",
    "NormalizerSettings",
    "VectorizerSettings",
    "ConsensusSettings",
    "KMeansSettings",
    "ClusteringSettings",
    "MatchWeights",
    "MultiAccountSettings",
    "ResolverSettings",
    "AggregationSettings",
    "deep_merge_dicts",
    "default_config",
    "load_config",
]
