"""Parameter-count estimation from a Hugging Face config.json.

Pure computation, no I/O. Used when the Hub does not publish an
authoritative parameter total for a repo.
"""

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Defaults for fields a config may omit
# ---------------------------------------------------------------------------

DEFAULT_LAYERS = 32
DEFAULT_HIDDEN_SIZE = 4096
DEFAULT_ATTENTION_HEADS = 32
DEFAULT_VOCAB_SIZE = 32000
DEFAULT_MAX_CONTEXT = 4096


@dataclass(frozen=True)
class ArchitectureFields:
    """Config fields normalized across naming conventions (Llama vs GPT-2 style)."""

    layers: int
    hidden_size: int
    num_attention_heads: int
    num_kv_heads: int
    intermediate_size: int
    vocab_size: int
    max_context_length: int
    num_experts: int
    num_active_experts: int

    @property
    def is_moe(self) -> bool:
        return self.num_experts > 1

    @property
    def head_dim(self) -> float:
        return self.hidden_size / self.num_attention_heads


@dataclass(frozen=True)
class ParamEstimate:
    total_b: float
    active_b: float


# ---------------------------------------------------------------------------
# Multimodal wrapper handling
# ---------------------------------------------------------------------------


def resolve_text_config(config: dict) -> dict:
    """Unwrap multimodal configs (e.g. Llava, Gemma 3) to get the text backbone."""
    text_config = config.get("text_config")
    if isinstance(text_config, dict) and "num_hidden_layers" not in config:
        return text_config
    return config


def _first(config: dict, *keys: str) -> int | None:
    for key in keys:
        value = config.get(key)
        if value:
            return int(value)
    return None


def read_architecture(raw_config: dict) -> ArchitectureFields:
    """Normalize a config, filling Llama-like defaults for missing fields."""
    config = resolve_text_config(raw_config)

    layers = _first(config, "num_hidden_layers", "n_layer") or DEFAULT_LAYERS
    hidden = _first(config, "hidden_size", "n_embd") or DEFAULT_HIDDEN_SIZE
    heads = _first(config, "num_attention_heads", "n_head") or DEFAULT_ATTENTION_HEADS

    return ArchitectureFields(
        layers=layers,
        hidden_size=hidden,
        num_attention_heads=heads,
        num_kv_heads=_first(config, "num_key_value_heads") or heads,
        intermediate_size=_first(config, "intermediate_size") or hidden * 4,
        vocab_size=_first(config, "vocab_size") or DEFAULT_VOCAB_SIZE,
        max_context_length=_first(config, "max_position_embeddings") or DEFAULT_MAX_CONTEXT,
        num_experts=_first(config, "num_local_experts", "num_experts") or 1,
        num_active_experts=_first(config, "num_experts_per_tok") or 1,
    )


# ---------------------------------------------------------------------------
# Parameter estimation
# ---------------------------------------------------------------------------


def _attention_params(arch: ArchitectureFields) -> float:
    """Q and O projections (h×h each) plus K and V projections (h×head_dim×kv_heads each)."""
    h = arch.hidden_size
    return arch.layers * (h * h + h * arch.head_dim * arch.num_kv_heads * 2 + h * h)


def _mlp_params(arch: ArchitectureFields) -> float:
    """Gate, up and down projections for one expert across all layers."""
    return arch.layers * (arch.hidden_size * arch.intermediate_size * 3)


def _embedding_params(arch: ArchitectureFields) -> float:
    """Input embedding and LM head, counted separately even when tied."""
    return arch.vocab_size * arch.hidden_size * 2


def estimate_params(raw_config: dict) -> ParamEstimate:
    """Estimate total and active parameters (billions).

    MoE configs multiply the MLP cost by the expert count for the total and by
    the active-expert count for the active figure. Norms, biases and routers
    are ignored.
    """
    arch = read_architecture(raw_config)

    attention = _attention_params(arch)
    mlp = _mlp_params(arch)
    embeddings = _embedding_params(arch)

    if arch.is_moe:
        total = attention + mlp * arch.num_experts + embeddings
        active = attention + mlp * arch.num_active_experts + embeddings
    else:
        total = attention + mlp + embeddings
        active = total

    return ParamEstimate(total_b=total / 1e9, active_b=active / 1e9)
