"""HuggingFace model source: Hub search, config.json and safetensors metadata.

Every public function here degrades to ``None`` / ``[]`` on failure so
callers never have to handle network errors.
"""

import logging

import httpx
from pydantic import ValidationError

from llmfit.config import HF_ENDPOINT, HTTP_TIMEOUT
from llmfit.sources.cache import TTLCache
from llmfit.sources.param_counter import estimate_params, read_architecture
from llmfit.specs import ModelSource, ModelSpec

logger = logging.getLogger(__name__)

MODEL_CACHE_PREFIX = "hf_model:"
SEARCH_CACHE_PREFIX = "hf_search:"

MIN_QUERY_LENGTH = 2
# Only the top hits get their config.json resolved
MAX_RESOLVED_RESULTS = 10


def _get_json(url: str, **params):
    response = httpx.get(
        url, params=params or None, timeout=HTTP_TIMEOUT, follow_redirects=True
    )
    response.raise_for_status()
    return response.json()


def fetch_hf_config(hf_id: str) -> dict | None:
    """Download ``config.json`` from the main branch of *hf_id*."""
    try:
        config = _get_json(f"{HF_ENDPOINT}/{hf_id}/resolve/main/config.json")
    except (httpx.HTTPError, ValueError) as e:
        logger.debug("config.json unavailable for %s: %s", hf_id, e)
        return None
    logger.info("Downloaded config.json for %s", hf_id)
    return config


def fetch_hf_param_count(hf_id: str) -> float | None:
    """Published parameter total (billions) from the repo's safetensors metadata.

    Gated and GGUF-only repos publish nothing; those return None.
    """
    try:
        info = _get_json(f"{HF_ENDPOINT}/api/models/{hf_id}")
    except (httpx.HTTPError, ValueError) as e:
        logger.debug("Model info unavailable for %s: %s", hf_id, e)
        return None

    by_dtype = (info.get("safetensors") or {}).get("parameters") or {}
    if not by_dtype:
        return None
    params_b = sum(by_dtype.values()) / 1e9
    logger.info("Published parameter total for %s: %.2fB", hf_id, params_b)
    return params_b


def config_to_model_spec(
    hf_id: str,
    config: dict,
    published_params_b: float | None = None,
) -> ModelSpec:
    """Build a ModelSpec from a config.json.

    *published_params_b* (the safetensors total) replaces the estimated total
    when given; the active figure of an MoE model is then scaled by the same
    ratio.

    Raises:
        pydantic.ValidationError: If the config describes an impossible shape
            (e.g. more KV heads than attention heads).
    """
    arch = read_architecture(config)
    estimate = estimate_params(config)

    total_b = estimate.total_b
    active_b = estimate.active_b
    if published_params_b:
        active_b = active_b * published_params_b / total_b
        total_b = published_params_b

    org, _, name = hf_id.rpartition("/")

    return ModelSpec(
        id=hf_id.replace("/", "-").lower(),
        name=name,
        organization=org or "Unknown",
        source=ModelSource.HUB,
        params=round(total_b, 2),
        layers=arch.layers,
        num_attention_heads=arch.num_attention_heads,
        num_kv_heads=arch.num_kv_heads,
        hidden_size=arch.hidden_size,
        intermediate_size=arch.intermediate_size,
        max_context_length=arch.max_context_length,
        is_moe=arch.is_moe,
        active_params=round(active_b, 2) if arch.is_moe else None,
        num_experts=arch.num_experts if arch.is_moe else None,
        num_active_experts=arch.num_active_experts if arch.is_moe else None,
        hf_model_id=hf_id,
    )


def fetch_model_spec(hf_id: str, cache: TTLCache | None = None) -> ModelSpec | None:
    """Resolve a Hub repo to a ModelSpec, or None if its config is unusable."""
    cache_key = MODEL_CACHE_PREFIX + hf_id
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return ModelSpec.model_validate(cached)

    config = fetch_hf_config(hf_id)
    if not isinstance(config, dict):
        return None

    published_params_b = fetch_hf_param_count(hf_id)

    try:
        spec = config_to_model_spec(hf_id, config, published_params_b)
    except (ValidationError, ValueError, TypeError) as e:
        logger.warning("Unusable config for %s: %s", hf_id, e)
        return None

    if not spec.has_integral_head_dim:
        logger.warning(
            "%s: hidden_size %d not divisible by %d heads, KV estimate is approximate",
            hf_id,
            spec.hidden_size,
            spec.num_attention_heads,
        )

    logger.info(
        "  -> %s: %.2fB params (active=%s), %d layers, ctx=%d",
        spec.id,
        spec.params,
        spec.active_params,
        spec.layers,
        spec.max_context_length,
    )

    if cache is not None:
        cache.set(cache_key, spec.model_dump(mode="json"))
    return spec


def search_hub(query: str, limit: int = 20) -> list[str]:
    """Return repo ids of text-generation models matching *query*, most downloaded first.

    Raises:
        httpx.HTTPError: On network or HTTP status failure.
    """
    hits = _get_json(
        f"{HF_ENDPOINT}/api/models",
        search=query,
        filter="text-generation",
        sort="downloads",
        direction=-1,
        limit=limit,
    )
    return [item["id"] for item in hits if "id" in item]


def search_models(
    query: str,
    cache: TTLCache | None = None,
    limit: int = 20,
) -> list[ModelSpec]:
    """Search the Hub and resolve the top hits to ModelSpecs.

    Queries shorter than two characters return nothing. Hits whose config
    cannot be resolved are skipped.
    """
    query = query.strip()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    cache_key = SEARCH_CACHE_PREFIX + query.lower()
    if cache is not None:
        cached = cache.get(cache_key)
        if cached is not None:
            return [ModelSpec.model_validate(m) for m in cached]

    try:
        hf_ids = search_hub(query, limit=limit)
    except (httpx.HTTPError, ValueError, TypeError) as e:
        logger.warning("HuggingFace search failed for '%s': %s", query, e)
        return []

    models = []
    for hf_id in hf_ids[:MAX_RESOLVED_RESULTS]:
        spec = fetch_model_spec(hf_id, cache=cache)
        if spec is not None:
            models.append(spec)

    logger.info("Resolved %d/%d search hits for '%s'", len(models), len(hf_ids), query)

    if cache is not None:
        cache.set(cache_key, [m.model_dump(mode="json") for m in models])
    return models
