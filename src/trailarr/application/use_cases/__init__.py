from .resolve_trailer import TrailerResolveUseCase

__all__ = ["TrailerResolveUseCase"]
