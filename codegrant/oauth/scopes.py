"""Scope parsing and human-readable descriptions."""

from codegrant.oauth.types import ScopeDisplay

SCOPE_DESCRIPTIONS = {
    "read": "View your expenses, categories and reports",
    "write": "Create, edit and delete expenses and categories",
    "admin": "Full access to all administration features",
    "profile": "View your user profile information",
    "profile:write": "Modify your user profile information",
}


def split_scope(scope: str | None) -> list[str]:
    """Split a space-delimited scope string, dropping duplicates in order."""
    if not scope:
        return []
    return list(dict.fromkeys(scope.split()))


def describe_scope(name: str) -> ScopeDisplay:
    description = SCOPE_DESCRIPTIONS.get(name, f"Access to scope: {name}")
    return ScopeDisplay(name=name, description=description)


def describe_scopes(names: list[str]) -> list[ScopeDisplay]:
    return [describe_scope(n) for n in names]
