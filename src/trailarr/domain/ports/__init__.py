from .extraction_strategy import ExtractionStrategyPort
from .stream_validator import StreamValidatorPort

__all__ = [
    "ExtractionStrategyPort",
    "StreamValidatorPort",
]
