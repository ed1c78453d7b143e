"""Shared exception types."""


class FormatBreakingChange(Exception):
    """Raised when an upstream data source has changed its format.

    Carries *source* (e.g. "gpu-database/nvidia") and a human-readable
    *details* string describing what no longer matches.
    """

    def __init__(self, source: str, details: str) -> None:
        self.source = source
        self.details = details
        super().__init__(f"Breaking format change in {source}: {details}")


class UnknownQuantizationError(ValueError):
    """Raised for a quantization level missing from the bits-per-weight table."""

    def __init__(self, level: str) -> None:
        self.level = level
        super().__init__(f"Unknown quantization level '{level}'")


class ModelNotFoundError(Exception):
    """Raised when a model id matches neither the seed catalog nor the Hub."""

    def __init__(self, model_id: str) -> None:
        self.model_id = model_id
        super().__init__(f"No model found for '{model_id}'")


class AcceleratorNotFoundError(Exception):
    """Raised when an accelerator name matches nothing in the catalog."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No accelerator matches '{name}'")
