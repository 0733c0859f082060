from .catalog import CatalogUseCase, ResolvedLinks

__all__ = ["CatalogUseCase", "ResolvedLinks"]
