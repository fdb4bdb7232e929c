"""Decides which repositories may be listed publicly."""
from typing import Iterable
from registry_lister.domain.models import ScopeRequest


def is_public(prefixes: Iterable[str], request: ScopeRequest) -> bool:
    """Check whether a scope request falls under a public name prefix.

    Only `repository` scopes can be public. With no prefixes configured
    nothing is public.

    Args:
        prefixes: Configured public name prefixes
        request: Scope being evaluated

    Returns:
        True if the repository name starts with any prefix
    """
    if request.resource_type != "repository":
        return False
    return any(request.name.startswith(prefix) for prefix in prefixes)
