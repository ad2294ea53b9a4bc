from .settings import ArbitrationConfig, validate_threshold

__all__ = ["ArbitrationConfig", "validate_threshold"]
