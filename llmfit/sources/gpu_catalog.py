"""Accelerator catalog: RightNow GPU database plus Apple Silicon presets.

Network and format failures never propagate: a vendor that cannot be fetched
contributes nothing, and the catalog still returns the static presets.
"""

import logging

import httpx

from llmfit.config import GPU_DATABASE_BASE_URL, HTTP_TIMEOUT
from llmfit.data.unified_memory import UNIFIED_MEMORY_PRESETS
from llmfit.errors import FormatBreakingChange
from llmfit.sources.cache import TTLCache
from llmfit.sources.dbgpu_source import fetch_dbgpu_accelerators
from llmfit.specs import AcceleratorSpec, Vendor

logger = logging.getLogger(__name__)

CACHE_KEY = "gpu_database"

GPU_DATABASE_URLS: dict[Vendor, str] = {
    Vendor.NVIDIA: f"{GPU_DATABASE_BASE_URL}/nvidia/all.json",
    Vendor.AMD: f"{GPU_DATABASE_BASE_URL}/amd/all.json",
    Vendor.INTEL: f"{GPU_DATABASE_BASE_URL}/intel/all.json",
}

# Cards below this cannot hold any model worth estimating
MIN_MEMORY_GB = 4


def map_raw_gpu(raw: dict, vendor: Vendor) -> AcceleratorSpec | None:
    """Convert one database record; records without memory size are dropped."""
    memory_size = raw.get("memorySize")
    if not memory_size or memory_size <= 0:
        return None

    return AcceleratorSpec(
        name=raw["name"],
        vendor=vendor,
        memory_size_gb=memory_size,
        memory_bandwidth_gbps=raw.get("memoryBandwidth") or 0,
        memory_type=raw.get("memoryType") or "Unknown",
        architecture=raw.get("architecture"),
        generation=raw.get("generation"),
        tdp_watts=raw.get("tdp"),
    )


def filter_relevant(gpus: list[AcceleratorSpec]) -> list[AcceleratorSpec]:
    """Keep GPUs with at least 4 GB, largest memory first."""
    relevant = [gpu for gpu in gpus if gpu.memory_size_gb >= MIN_MEMORY_GB]
    relevant.sort(key=lambda gpu: gpu.memory_size_gb, reverse=True)
    return relevant


def fetch_vendor_accelerators(vendor: Vendor, url: str) -> list[AcceleratorSpec]:
    """Fetch and map one vendor's GPU list.

    Raises:
        httpx.HTTPError: On network or HTTP status failure.
        FormatBreakingChange: If the payload is not a list of records.
    """
    response = httpx.get(url, timeout=HTTP_TIMEOUT, follow_redirects=True)
    response.raise_for_status()
    payload = response.json()

    if not isinstance(payload, list):
        raise FormatBreakingChange(
            source=f"gpu-database/{vendor.value}",
            details=f"Expected a JSON list of GPUs, got {type(payload).__name__}",
        )

    results = []
    for raw in payload:
        if not isinstance(raw, dict) or "name" not in raw:
            continue
        spec = map_raw_gpu(raw, vendor)
        if spec is not None:
            results.append(spec)

    logger.info("Fetched %d %s GPUs", len(results), vendor.value)
    return results


def fetch_accelerators(
    cache: TTLCache | None = None,
    *,
    offline_fallback: bool = True,
) -> list[AcceleratorSpec]:
    """Return the full accelerator catalog.

    Discrete GPUs come from *cache* when fresh, otherwise from the online
    database (and from dbgpu when every vendor fails and *offline_fallback*
    is set). Apple Silicon presets are always appended and never cached.
    """
    if cache is not None:
        cached = cache.get(CACHE_KEY)
        if cached is not None:
            logger.debug("Using cached GPU catalog (%d entries)", len(cached))
            return [AcceleratorSpec.model_validate(g) for g in cached] + UNIFIED_MEMORY_PRESETS

    gpus: list[AcceleratorSpec] = []
    for vendor, url in GPU_DATABASE_URLS.items():
        try:
            gpus.extend(fetch_vendor_accelerators(vendor, url))
        except (httpx.HTTPError, ValueError, FormatBreakingChange) as e:
            logger.warning("Failed to fetch %s GPUs: %s", vendor.value, e)

    if not gpus and offline_fallback:
        logger.info("Online GPU database unavailable, falling back to dbgpu")
        try:
            gpus = fetch_dbgpu_accelerators()
        except Exception as e:
            logger.warning("dbgpu fallback failed: %s", e)

    relevant = filter_relevant(gpus)

    if relevant and cache is not None:
        cache.set(CACHE_KEY, [g.model_dump(mode="json") for g in relevant])

    return relevant + UNIFIED_MEMORY_PRESETS


def group_by_vendor(gpus: list[AcceleratorSpec]) -> dict[Vendor, list[AcceleratorSpec]]:
    grouped: dict[Vendor, list[AcceleratorSpec]] = {vendor: [] for vendor in Vendor}
    for gpu in gpus:
        grouped[gpu.vendor].append(gpu)
    return grouped


def search_accelerators(gpus: list[AcceleratorSpec], query: str) -> list[AcceleratorSpec]:
    """Case-insensitive substring match on name, vendor or architecture."""
    q = query.lower().strip()
    if not q:
        return gpus
    return [
        gpu
        for gpu in gpus
        if q in gpu.name.lower()
        or q in gpu.vendor.value
        or (gpu.architecture and q in gpu.architecture.lower())
    ]


def find_accelerator(gpus: list[AcceleratorSpec], name: str) -> AcceleratorSpec | None:
    """Exact (case-insensitive) name match first, then the first substring match."""
    wanted = name.lower().strip()
    for gpu in gpus:
        if gpu.name.lower() == wanted:
            return gpu
    matches = search_accelerators(gpus, name)
    return matches[0] if matches else None
