"""
Factory for creating the generation proxy module.
"""
from typing import Dict, Any, Optional

from generation_service.llm_utils import LLMProvider
from .models import GenerationConfig
from .services import GenerationService
from .routes import create_generation_routes


def create_generation_module(
    llm_config,
    generation_config: GenerationConfig,
    quota_manager,
    llm_provider: Optional[LLMProvider] = None,
) -> Dict[str, Any]:
    """Create and configure the generation proxy components."""
    if llm_provider is None:
        llm_provider = LLMProvider(
            api_key=llm_config.api_key,
            base_url=llm_config.base_url or None,
            provider=llm_config.provider,
            model=llm_config.model,
            max_tokens=llm_config.max_tokens,
            timeout=llm_config.timeout,
        )

    generation_service = GenerationService(llm_provider, generation_config)
    blueprint = create_generation_routes(generation_service, quota_manager)

    return {
        "blueprint": blueprint,
        "service": generation_service,
        "llm_provider": llm_provider,
    }
