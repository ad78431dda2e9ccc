from .client import DEFAULT_API_URL, MoyskladClient, token_from_env

__all__ = ["DEFAULT_API_URL", "MoyskladClient", "token_from_env"]
