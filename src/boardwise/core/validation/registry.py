"""Registry mapping component names to validators."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from boardwise.core.exceptions import UnknownComponentError

from .base import ComponentValidator

logger = logging.getLogger(__name__)


class ValidatorRegistry:
    """Component name -> validator instance.

    Example:
        registry = ValidatorRegistry.default()
        registry.register(MyFanValidator())
        registry.select(["cpu", "fan", "cpu"])  # -> ["cpu", "fan"]
    """

    def __init__(self, validators: Optional[Iterable[ComponentValidator]] = None) -> None:
        self._validators: Dict[str, ComponentValidator] = {}
        for validator in validators or ():
            self.register(validator)

    @classmethod
    def default(cls) -> "ValidatorRegistry":
        from .validators import BUILTIN_VALIDATORS

        return cls(v() for v in BUILTIN_VALIDATORS)

    def register(self, validator: ComponentValidator, *, replace: bool = False) -> None:
        if not validator.name:
            raise ValueError(f"Validator {validator!r} has no name")
        if validator.name in self._validators and not replace:
            raise ValueError(f"Validator '{validator.name}' is already registered")
        self._validators[validator.name] = validator
        logger.debug("Registered validator %s", validator.name)

    def get(self, name: str) -> Optional[ComponentValidator]:
        return self._validators.get(name)

    def require(self, name: str) -> ComponentValidator:
        """Like :meth:`get`, but an unknown name raises ``UnknownComponentError``."""
        validator = self._validators.get(name)
        if validator is None:
            raise UnknownComponentError([name], sorted(self._validators))
        return validator

    def names(self) -> List[str]:
        return list(self._validators)

    def select(self, components: Iterable[str]) -> List[str]:
        """Normalize a selection: drop duplicates (first wins), reject unknown names.

        Raises:
            UnknownComponentError: when any name has no validator.
        """
        ordered: List[str] = []
        for raw in components:
            name = str(raw).strip()
            if name and name not in ordered:
                ordered.append(name)
        unknown = [n for n in ordered if n not in self._validators]
        if unknown:
            raise UnknownComponentError(unknown, sorted(self._validators))
        return ordered

    def __contains__(self, name: object) -> bool:
        return name in self._validators

    def __iter__(self) -> Iterator[ComponentValidator]:
        return iter(self._validators.values())

    def __len__(self) -> int:
        return len(self._validators)


__all__ = ["ValidatorRegistry"]
