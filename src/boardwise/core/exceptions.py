from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class BoardwiseError(Exception):
    """Base exception for boardwise."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class CatalogIntegrityError(BoardwiseError, ValueError):
    """Raised when catalog data is internally inconsistent.

    Always fatal: no identity, configuration or validation result is
    meaningful once the catalog fails its integrity checks.
    """

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BoardwiseError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class AmbiguousRuleError(CatalogIntegrityError):
    """Two identity rules of equal specificity can match the same device."""


class RuleOrderError(CatalogIntegrityError):
    """A rule is shadowed by an earlier, less specific rule of the same kind."""


class MissingAncestorError(CatalogIntegrityError):
    """A profile declares an ancestor that the catalog does not contain."""

    def __init__(self, profile_id: str, ancestor_id: str) -> None:
        super().__init__(
            f"Profile '{profile_id}' declares unknown ancestor '{ancestor_id}'",
            context={"profile": profile_id, "ancestor": ancestor_id},
        )
        self.profile_id = profile_id
        self.ancestor_id = ancestor_id


class FallbackMissingError(CatalogIntegrityError):
    """The designated generic fallback profile is not in the catalog."""


class NoMatchError(BoardwiseError, LookupError):
    """No identity rule matched and no generic fallback applies."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BoardwiseError.__init__(self, message, context=context)
        LookupError.__init__(self, message)


class OverlayConflict(BoardwiseError):
    """Two overlay fragments collide on the same hardware-description property."""

    def __init__(
        self,
        message: str,
        *,
        fragments: tuple[str, str],
        path: str,
        property: Optional[str] = None,
    ) -> None:
        ctx: Dict[str, Any] = {"fragments": list(fragments), "path": path}
        if property is not None:
            ctx["property"] = property
        super().__init__(message, context=ctx)
        self.fragments = fragments
        self.path = path
        self.property = property


class ComponentFailure(BoardwiseError):
    """A hardware probe failed. Captured into the report, never propagated."""

    def __init__(
        self,
        message: str,
        *,
        metric: Any = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message, context=context)
        self.metric = metric


class ValidationTimeout(ComponentFailure):
    """A component probe exceeded its time budget."""

    def __init__(self, component: str, timeout: float) -> None:
        super().__init__(
            f"timed out after {timeout:g}s",
            context={"component": component, "timeout": timeout},
        )
        self.component = component
        self.timeout = timeout


class UnknownComponentError(BoardwiseError, KeyError):
    """A component was selected that has no registered validator."""

    def __init__(self, names: list[str], known: list[str]) -> None:
        message = f"Unknown component(s): {', '.join(names)} (known: {', '.join(known)})"
        BoardwiseError.__init__(self, message, context={"components": names, "known": known})
        KeyError.__init__(self, message)

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class SettingsError(BoardwiseError, ValueError):
    """Raised when tool settings are malformed or fail schema validation."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        BoardwiseError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


__all__ = [
    "BoardwiseError",
    "CatalogIntegrityError",
    "AmbiguousRuleError",
    "RuleOrderError",
    "MissingAncestorError",
    "FallbackMissingError",
    "NoMatchError",
    "OverlayConflict",
    "ComponentFailure",
    "ValidationTimeout",
    "UnknownComponentError",
    "SettingsError",
]
