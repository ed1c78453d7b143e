"""Curated models offered without a Hub lookup.

Shapes are taken from each model's published config.json; parameter counts
are the totals shown on the Hugging Face model page.
"""

from llmfit.specs import ModelSource, ModelSpec


def _seed(hf_id: str, name: str, organization: str, **shape) -> ModelSpec:
    return ModelSpec(
        id=hf_id.replace("/", "-").lower(),
        name=name,
        organization=organization,
        source=ModelSource.SEED,
        hf_model_id=hf_id,
        **shape,
    )


SEED_MODELS: list[ModelSpec] = [
    # Small
    _seed(
        "meta-llama/Llama-3.2-1B-Instruct", "Llama 3.2 1B", "Meta",
        params=1.24, layers=16, num_attention_heads=32, num_kv_heads=8,
        hidden_size=2048, intermediate_size=8192, max_context_length=131072,
    ),
    _seed(
        "google/gemma-2-2b-it", "Gemma 2 2B", "Google",
        params=2.61, layers=26, num_attention_heads=8, num_kv_heads=4,
        hidden_size=2304, intermediate_size=9216, max_context_length=8192,
    ),
    _seed(
        "meta-llama/Llama-3.2-3B-Instruct", "Llama 3.2 3B", "Meta",
        params=3.21, layers=28, num_attention_heads=24, num_kv_heads=8,
        hidden_size=3072, intermediate_size=8192, max_context_length=131072,
    ),
    # Medium
    _seed(
        "microsoft/Phi-3-mini-4k-instruct", "Phi-3 Mini", "Microsoft",
        params=3.82, layers=32, num_attention_heads=32, num_kv_heads=32,
        hidden_size=3072, intermediate_size=8192, max_context_length=4096,
    ),
    _seed(
        "mistralai/Mistral-7B-Instruct-v0.3", "Mistral 7B v0.3", "Mistral AI",
        params=7.25, layers=32, num_attention_heads=32, num_kv_heads=8,
        hidden_size=4096, intermediate_size=14336, max_context_length=32768,
    ),
    _seed(
        "Qwen/Qwen2.5-7B-Instruct", "Qwen2.5 7B", "Alibaba",
        params=7.62, layers=28, num_attention_heads=28, num_kv_heads=4,
        hidden_size=3584, intermediate_size=18944, max_context_length=32768,
    ),
    _seed(
        "meta-llama/Llama-3.1-8B-Instruct", "Llama 3.1 8B", "Meta",
        params=8.03, layers=32, num_attention_heads=32, num_kv_heads=8,
        hidden_size=4096, intermediate_size=14336, max_context_length=131072,
    ),
    _seed(
        "google/gemma-2-9b-it", "Gemma 2 9B", "Google",
        params=9.24, layers=42, num_attention_heads=16, num_kv_heads=8,
        hidden_size=3584, intermediate_size=14336, max_context_length=8192,
    ),
    # Large
    _seed(
        "mistralai/Mistral-Nemo-Instruct-2407", "Mistral Nemo 12B", "Mistral AI",
        params=12.2, layers=40, num_attention_heads=32, num_kv_heads=8,
        hidden_size=5120, intermediate_size=14336, max_context_length=131072,
    ),
    _seed(
        "microsoft/Phi-3-medium-4k-instruct", "Phi-3 Medium", "Microsoft",
        params=14.0, layers=40, num_attention_heads=40, num_kv_heads=10,
        hidden_size=5120, intermediate_size=17920, max_context_length=4096,
    ),
    _seed(
        "Qwen/Qwen2.5-14B-Instruct", "Qwen2.5 14B", "Alibaba",
        params=14.7, layers=48, num_attention_heads=40, num_kv_heads=8,
        hidden_size=5120, intermediate_size=13824, max_context_length=32768,
    ),
    # XL
    _seed(
        "google/gemma-2-27b-it", "Gemma 2 27B", "Google",
        params=27.2, layers=46, num_attention_heads=32, num_kv_heads=16,
        hidden_size=4608, intermediate_size=36864, max_context_length=8192,
    ),
    _seed(
        "Qwen/Qwen2.5-32B-Instruct", "Qwen2.5 32B", "Alibaba",
        params=32.8, layers=64, num_attention_heads=40, num_kv_heads=8,
        hidden_size=5120, intermediate_size=27648, max_context_length=32768,
    ),
    # XXL
    _seed(
        "meta-llama/Llama-3.1-70B-Instruct", "Llama 3.1 70B", "Meta",
        params=70.6, layers=80, num_attention_heads=64, num_kv_heads=8,
        hidden_size=8192, intermediate_size=28672, max_context_length=131072,
    ),
    _seed(
        "Qwen/Qwen2.5-72B-Instruct", "Qwen2.5 72B", "Alibaba",
        params=72.7, layers=80, num_attention_heads=64, num_kv_heads=8,
        hidden_size=8192, intermediate_size=29568, max_context_length=32768,
    ),
    # MoE
    _seed(
        "deepseek-ai/DeepSeek-Coder-V2-Lite-Instruct", "DeepSeek Coder V2 Lite", "DeepSeek",
        params=15.7, layers=27, num_attention_heads=16, num_kv_heads=16,
        hidden_size=2048, intermediate_size=10944, max_context_length=163840,
        is_moe=True, active_params=2.4, num_experts=64, num_active_experts=6,
    ),
    _seed(
        "mistralai/Mixtral-8x7B-Instruct-v0.1", "Mixtral 8x7B", "Mistral AI",
        params=46.7, layers=32, num_attention_heads=32, num_kv_heads=8,
        hidden_size=4096, intermediate_size=14336, max_context_length=32768,
        is_moe=True, active_params=12.9, num_experts=8, num_active_experts=2,
    ),
    _seed(
        "mistralai/Mixtral-8x22B-Instruct-v0.1", "Mixtral 8x22B", "Mistral AI",
        params=141.0, layers=56, num_attention_heads=48, num_kv_heads=8,
        hidden_size=6144, intermediate_size=16384, max_context_length=65536,
        is_moe=True, active_params=39.1, num_experts=8, num_active_experts=2,
    ),
]


def get_seed_model(model_id: str) -> ModelSpec | None:
    """Find a seed model by its id or Hugging Face repo id (case-insensitive)."""
    wanted = model_id.strip().lower()
    for model in SEED_MODELS:
        if model.id == wanted or (model.hf_model_id or "").lower() == wanted:
            return model
    return None
