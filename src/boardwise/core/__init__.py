"""boardwise core library.

Subpackages:
- platform: identity rules, profiles, descriptors and the matcher
- catalog: catalog container and YAML loader
- config: configuration layers, resolver and tool settings
- overlays: hardware descriptions and overlay composition
- validation: component validators and the pipeline
"""

from . import exceptions  # noqa: F401

__all__ = ["exceptions"]
