from leadhub.platform.security import BaseRepository, Identity, resolve_scope

__all__ = ["BaseRepository", "Identity", "resolve_scope"]
