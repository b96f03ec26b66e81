"""Rich message composition: document model, markup codec and suggestions."""

from chat_composer.composer import Composer, SubmitOutcome
from chat_composer.document import Document, Position
from chat_composer.fuzzy import FuzzyMatch, fuzzy_match
from chat_composer.markup import parse, serialize
from chat_composer.suggestions import SuggestionEngine


__all__ = [
    'Composer',
    'Document',
    'FuzzyMatch',
    'Position',
    'SubmitOutcome',
    'SuggestionEngine',
    'fuzzy_match',
    'parse',
    'serialize',
]
