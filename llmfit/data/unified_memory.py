"""Apple Silicon presets.

No public catalog lists these chips, so they are kept here. CPU and GPU share
one memory pool; ``memory_size_gb`` is the whole pool.
"""

from llmfit.specs import AcceleratorSpec, Vendor


def _chip(
    name: str, memory_gb: float, bandwidth: float, memory_type: str, generation: str
) -> AcceleratorSpec:
    return AcceleratorSpec(
        name=f"{name} ({memory_gb:g}GB)",
        vendor=Vendor.APPLE,
        memory_size_gb=memory_gb,
        memory_bandwidth_gbps=bandwidth,
        memory_type=memory_type,
        architecture=name,
        generation=generation,
    )


# (chip, memory configurations in GB, bandwidth GB/s, memory type, generation)
_CHIPS: list[tuple[str, tuple[int, ...], float, str, str]] = [
    ("M1", (8, 16), 68.25, "Unified LPDDR4X", "M1"),
    ("M1 Pro", (16, 32), 200, "Unified LPDDR5", "M1"),
    ("M1 Max", (32, 64), 400, "Unified LPDDR5", "M1"),
    ("M1 Ultra", (64, 128), 800, "Unified LPDDR5", "M1"),
    ("M2", (8, 16, 24), 100, "Unified LPDDR5", "M2"),
    ("M2 Pro", (16, 32), 200, "Unified LPDDR5", "M2"),
    ("M2 Max", (32, 64, 96), 400, "Unified LPDDR5", "M2"),
    ("M2 Ultra", (64, 128, 192), 800, "Unified LPDDR5", "M2"),
    ("M3", (8, 16, 24), 100, "Unified LPDDR5", "M3"),
    ("M3 Pro", (18, 36), 150, "Unified LPDDR5", "M3"),
    ("M3 Max", (36, 48, 64, 96, 128), 400, "Unified LPDDR5", "M3"),
    ("M4", (16, 24, 32), 120, "Unified LPDDR5X", "M4"),
    ("M4 Pro", (24, 48), 273, "Unified LPDDR5X", "M4"),
    ("M4 Max", (36, 48, 64, 128), 546, "Unified LPDDR5X", "M4"),
]

UNIFIED_MEMORY_PRESETS: list[AcceleratorSpec] = [
    _chip(chip, memory_gb, bandwidth, memory_type, generation)
    for chip, sizes, bandwidth, memory_type, generation in _CHIPS
    for memory_gb in sizes
]


def find_preset(name: str) -> AcceleratorSpec | None:
    """Look up a preset by exact name, case-insensitively (e.g. "m2 max (64gb)")."""
    wanted = name.strip().lower()
    for preset in UNIFIED_MEMORY_PRESETS:
        if preset.name.lower() == wanted:
            return preset
    return None
