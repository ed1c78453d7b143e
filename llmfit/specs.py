"""Data contracts shared by the estimation engine and its data sources."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModelSource(str, Enum):
    HUB = "hub"
    SEED = "seed"
    CUSTOM = "custom"


class ModelCategory(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XL = "xl"
    XXL = "xxl"
    MOE = "moe"


class Vendor(str, Enum):
    NVIDIA = "nvidia"
    AMD = "amd"
    INTEL = "intel"
    APPLE = "apple"


class Verdict(str, Enum):
    FULL_GPU = "full_gpu"
    PARTIAL_OFFLOAD = "partial_offload"
    CPU_ONLY = "cpu_only"
    CANNOT_RUN = "cannot_run"

    @property
    def label(self) -> str:
        return _VERDICT_DISPLAY[self][0]

    @property
    def emoji(self) -> str:
        return _VERDICT_DISPLAY[self][1]


_VERDICT_DISPLAY: dict[Verdict, tuple[str, str]] = {
    Verdict.FULL_GPU: ("Full GPU", "✅"),
    Verdict.PARTIAL_OFFLOAD: ("Partial Offload", "⚡"),
    Verdict.CPU_ONLY: ("CPU Only", "🐢"),
    Verdict.CANNOT_RUN: ("Cannot Run", "❌"),
}


class SpeedCategory(str, Enum):
    FAST = "fast"
    MODERATE = "moderate"
    SLOW = "slow"
    VERY_SLOW = "very_slow"


class RecommendationType(str, Enum):
    QUANTIZATION = "quantization"
    CONTEXT = "context"
    HARDWARE = "hardware"
    MODEL = "model"
    TIP = "tip"


class Impact(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def categorize_model(params_b: float, is_moe: bool) -> ModelCategory:
    """Bucket a model by parameter count (billions)."""
    if is_moe:
        return ModelCategory.MOE
    if params_b <= 3:
        return ModelCategory.SMALL
    if params_b <= 10:
        return ModelCategory.MEDIUM
    if params_b <= 20:
        return ModelCategory.LARGE
    if params_b <= 40:
        return ModelCategory.XL
    return ModelCategory.XXL


class ModelSpec(BaseModel):
    """One LLM architecture variant."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    organization: str = "Unknown"
    source: ModelSource = ModelSource.CUSTOM
    params: float = Field(..., gt=0, description="Total parameters in billions")
    layers: int = Field(..., gt=0, description="Number of transformer blocks")
    num_attention_heads: int = Field(..., gt=0)
    num_kv_heads: int = Field(..., gt=0, description="KV heads (GQA/MQA), <= attention heads")
    hidden_size: int = Field(..., gt=0)
    intermediate_size: int = Field(..., gt=0)
    max_context_length: int = Field(..., gt=0)
    is_moe: bool = False
    active_params: float | None = Field(
        None, gt=0, description="Params evaluated per token in billions (MoE only)"
    )
    num_experts: int | None = Field(None, gt=0)
    num_active_experts: int | None = Field(None, gt=0)
    category: ModelCategory | None = None
    hf_model_id: str | None = Field(None, description="HuggingFace repo ID for linking")
    description: str | None = None

    @model_validator(mode="after")
    def _check_shape(self) -> "ModelSpec":
        if self.num_kv_heads > self.num_attention_heads:
            raise ValueError(
                f"num_kv_heads={self.num_kv_heads} exceeds "
                f"num_attention_heads={self.num_attention_heads}"
            )
        if self.category is None:
            object.__setattr__(self, "category", categorize_model(self.params, self.is_moe))
        return self

    @property
    def head_dim(self) -> float:
        return self.hidden_size / self.num_attention_heads

    @property
    def has_integral_head_dim(self) -> bool:
        """False when hidden_size does not split evenly across attention heads."""
        return self.hidden_size % self.num_attention_heads == 0


class AcceleratorSpec(BaseModel):
    """A GPU or unified-memory chip from the catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    vendor: Vendor
    memory_size_gb: float = Field(..., ge=0)
    memory_bandwidth_gbps: float = Field(0, ge=0, description="0 when unknown")
    memory_type: str = "Unknown"
    architecture: str | None = None
    generation: str | None = None
    tdp_watts: float | None = None


class HardwareSpec(BaseModel):
    """The machine a model should run on."""

    model_config = ConfigDict(frozen=True)

    accelerator: AcceleratorSpec | None = None
    accelerator_count: int = Field(1, ge=1, description="Ignored for unified memory")
    system_memory_gb: float = Field(..., ge=0)
    is_unified_memory: bool = False
    unified_memory_model_label: str | None = None
    custom_memory_override_gb: float | None = Field(
        None, ge=0, description="Usable accelerator memory, bypasses the catalog size"
    )

    @classmethod
    def for_accelerator(
        cls,
        accelerator: AcceleratorSpec,
        system_memory_gb: float,
        accelerator_count: int = 1,
        custom_memory_override_gb: float | None = None,
    ) -> "HardwareSpec":
        """Build hardware around a catalog entry.

        Apple chips share one memory pool, so they become unified-memory
        hardware with a single accelerator and system memory equal to the
        chip's memory size.
        """
        if accelerator.vendor == Vendor.APPLE:
            return cls(
                accelerator=accelerator,
                accelerator_count=1,
                system_memory_gb=accelerator.memory_size_gb,
                is_unified_memory=True,
                unified_memory_model_label=accelerator.name,
                custom_memory_override_gb=custom_memory_override_gb,
            )
        return cls(
            accelerator=accelerator,
            accelerator_count=accelerator_count,
            system_memory_gb=system_memory_gb,
            custom_memory_override_gb=custom_memory_override_gb,
        )


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: RecommendationType
    title: str
    description: str
    impact: Impact


class CalculationResult(BaseModel):
    """Everything derived for one (model, hardware, quantization, context) tuple."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    verdict: Verdict
    verdict_label: str
    verdict_emoji: str

    # Memory breakdown (GB)
    model_memory_gb: float
    kv_cache_memory_gb: float
    system_overhead_gb: float
    total_required_gb: float
    available_vram_gb: float
    available_ram_gb: float

    # Layer offloading
    total_layers: int
    layers_on_gpu: int
    layers_on_cpu: int
    offload_percentage: int

    # Performance estimate
    estimated_tokens_per_sec: float
    speed_category: SpeedCategory

    recommendations: list[Recommendation] = Field(default_factory=list)


class QuickCheckResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    vram_needed_gb: float


class ComparisonRow(BaseModel):
    """One row of a cross-model comparison table."""

    model_config = ConfigDict(frozen=True)

    model: ModelSpec
    verdict: Verdict
    vram_needed_gb: float
