"""Human-readable rendering of message markup."""

from chat_composer.formatting.models import MessagePreview
from chat_composer.formatting.resolver import EntityResolver, ResolvedContext
from chat_composer.formatting.text import CollectedEntities, collect_entities, format_text, render_document


__all__ = [
    'CollectedEntities',
    'EntityResolver',
    'MessagePreview',
    'ResolvedContext',
    'collect_entities',
    'format_text',
    'render_document',
]
