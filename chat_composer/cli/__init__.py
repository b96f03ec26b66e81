"""Terminal front end for the composer."""

from chat_composer.cli.completer import EntityCompleter
from chat_composer.cli.interactive import InteractiveConsole, run_interactive


__all__ = [
    'EntityCompleter',
    'InteractiveConsole',
    'run_interactive',
]
