"""
Provider descriptors and provider families.

Components:
- ProviderDescriptor / ShapedRequest: immutable upstream identity
- openai_compat: chat/completions request shaper and extractor
- gemini: generateContent request shaper and extractor
- registry: descriptors built from Settings
"""

from fallback_gateway.providers.descriptor import ProviderDescriptor, ShapedRequest
from fallback_gateway.providers.registry import PROVIDER_FACTORIES, build_providers

__all__ = [
    "ProviderDescriptor",
    "ShapedRequest",
    "PROVIDER_FACTORIES",
    "build_providers",
]
