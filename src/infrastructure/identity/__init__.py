"""Identity provider implementations."""

from src.infrastructure.identity.context_identity_provider import ContextIdentityProvider

__all__ = ["ContextIdentityProvider"]
