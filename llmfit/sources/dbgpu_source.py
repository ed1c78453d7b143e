"""Offline GPU specs from dbgpu (TechPowerUp database).

Used when the online GPU database cannot be reached. dbgpu ships its data
inside the package, so this source needs no network access.
"""

import logging

from dbgpu import GPUDatabase

from llmfit.specs import AcceleratorSpec, Vendor

logger = logging.getLogger(__name__)

# dbgpu manufacturer → our vendor. Anything else (Matrox, 3dfx, ...) is skipped.
MANUFACTURER_TO_VENDOR: dict[str, Vendor] = {
    "NVIDIA": Vendor.NVIDIA,
    "AMD": Vendor.AMD,
    "ATI": Vendor.AMD,
    "Intel": Vendor.INTEL,
}


def _to_accelerator(gpu) -> AcceleratorSpec | None:
    """Map one dbgpu specification to an AcceleratorSpec, or None if unusable."""
    vendor = MANUFACTURER_TO_VENDOR.get(gpu.manufacturer)
    if vendor is None:
        return None

    mem_gb = gpu.memory_size_gb or 0
    if mem_gb <= 0:
        return None

    return AcceleratorSpec(
        name=f"{gpu.manufacturer} {gpu.name}",
        vendor=vendor,
        memory_size_gb=mem_gb,
        memory_bandwidth_gbps=gpu.memory_bandwidth_gb_s or 0,
        memory_type=gpu.memory_type or "Unknown",
        architecture=gpu.architecture,
        generation=gpu.generation,
        tdp_watts=gpu.thermal_design_power_w,
    )


def fetch_dbgpu_accelerators(min_memory_gb: float = 0) -> list[AcceleratorSpec]:
    """All NVIDIA, AMD and Intel GPUs in dbgpu with at least *min_memory_gb*."""
    db = GPUDatabase.default()

    results: list[AcceleratorSpec] = []
    for gpu in db.specifications.values():
        spec = _to_accelerator(gpu)
        if spec is None or spec.memory_size_gb < min_memory_gb:
            continue
        results.append(spec)

    logger.info("Loaded %d GPUs from dbgpu", len(results))
    return results

