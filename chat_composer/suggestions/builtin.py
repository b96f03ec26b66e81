"""Built-in suggestion data: group mentions and standard emoji.

Both tables are immutable and built once at import; the engine receives
them through its constructor so tests can swap in synthetic data.
"""

from dataclasses import dataclass

from chat_composer.catalog.models import CustomEmoji
from chat_composer.document import SpecialMentionKind


@dataclass(frozen=True)
class SpecialMentionOption:
    """A group mention offered alongside members."""

    kind: SpecialMentionKind
    label: str
    description: str


SPECIAL_MENTIONS: tuple[SpecialMentionOption, ...] = (
    SpecialMentionOption(SpecialMentionKind.HERE, 'here', 'Notify active members in this channel'),
    SpecialMentionOption(SpecialMentionKind.CHANNEL, 'channel', 'Notify all members in this channel'),
    SpecialMentionOption(SpecialMentionKind.EVERYONE, 'everyone', 'Notify everyone in the workspace'),
)


def _emoji(shortcode: str, unicode: str) -> CustomEmoji:
    return CustomEmoji(shortcode=shortcode, unicode=unicode)


BUILTIN_EMOJI: tuple[CustomEmoji, ...] = (
    _emoji('+1', '👍'),
    _emoji('-1', '👎'),
    _emoji('100', '💯'),
    _emoji('blush', '😊'),
    _emoji('bug', '🐛'),
    _emoji('clap', '👏'),
    _emoji('coffee', '☕'),
    _emoji('confused', '😕'),
    _emoji('cry', '😢'),
    _emoji('eyes', '👀'),
    _emoji('fire', '🔥'),
    _emoji('grin', '😁'),
    _emoji('grinning', '😀'),
    _emoji('heart', '❤️'),
    _emoji('heavy_check_mark', '✔️'),
    _emoji('hourglass', '⌛'),
    _emoji('hugging_face', '🤗'),
    _emoji('joy', '😂'),
    _emoji('laughing', '😆'),
    _emoji('memo', '📝'),
    _emoji('ok_hand', '👌'),
    _emoji('party_popper', '🎉'),
    _emoji('pensive', '😔'),
    _emoji('point_up', '☝️'),
    _emoji('pray', '🙏'),
    _emoji('raised_hands', '🙌'),
    _emoji('rocket', '🚀'),
    _emoji('rotating_light', '🚨'),
    _emoji('see_no_evil', '🙈'),
    _emoji('shrug', '🤷'),
    _emoji('slightly_smiling_face', '🙂'),
    _emoji('smile', '😄'),
    _emoji('smiley', '😃'),
    _emoji('sob', '😭'),
    _emoji('sparkles', '✨'),
    _emoji('star', '⭐'),
    _emoji('sunglasses', '😎'),
    _emoji('sweat_smile', '😅'),
    _emoji('tada', '🎉'),
    _emoji('thinking_face', '🤔'),
    _emoji('thumbsdown', '👎'),
    _emoji('thumbsup', '👍'),
    _emoji('upside_down_face', '🙃'),
    _emoji('warning', '⚠️'),
    _emoji('wave', '👋'),
    _emoji('white_check_mark', '✅'),
    _emoji('wink', '😉'),
    _emoji('x', '❌'),
    _emoji('zap', '⚡'),
)
