"""Tests for the markup serializer and parser."""

import pytest

from chat_composer.document import (
    Blockquote,
    BulletList,
    ChannelMention,
    CodeBlock,
    Document,
    Emoji,
    Mark,
    OrderedList,
    Paragraph,
    SpecialMention,
    SpecialMentionKind,
    Text,
    UserMention,
)
from chat_composer.markup import parse, parse_inline, serialize, serialize_inline
from chat_composer.markup.patterns import escape_text, unescape


def _doc(*blocks) -> Document:
    return Document(blocks=list(blocks))


def _p(*nodes) -> Paragraph:
    return Paragraph(content=list(nodes))


BOLD = frozenset({Mark.BOLD})
ITALIC = frozenset({Mark.ITALIC})
LINK = 'https://example.com/a?b=1&c=2'

ROUND_TRIP_DOCUMENTS = [
    _doc(_p()),
    _doc(_p(Text(text='plain text'))),
    _doc(_p(Text(text='  padded  '))),
    _doc(_p(Text(text='Hello '), UserMention(user_id='U1', display_name='alice'), Text(text='!'))),
    _doc(_p(UserMention(user_id='U2'), ChannelMention(channel_id='C1'), SpecialMention(kind=SpecialMentionKind.HERE))),
    _doc(_p(UserMention(user_id='U1', display_name='a|b <c> & *d*'))),
    _doc(_p(Emoji(shortcode='tada', unicode='🎉'), Emoji(shortcode='parrot', image_url='https://e.example/p.gif'))),
    _doc(_p(Emoji(shortcode='+1'))),
    _doc(_p(Emoji(shortcode='party', image_url='/emoji/party.png'))),
    _doc(_p(Text(text='a', marks=BOLD), Text(text='b', marks=ITALIC))),
    _doc(_p(Text(text='a', marks=BOLD), Text(text='b', marks={Mark.BOLD, Mark.ITALIC}), Text(text='c'))),
    _doc(_p(Text(text='gone', marks={Mark.STRIKE, Mark.ITALIC, Mark.BOLD}))),
    _doc(_p(Text(text='x = *y* `z`', marks={Mark.CODE}))),
    _doc(_p(Text(text='docs', href=LINK), Text(text=' and '), Text(text=LINK, href=LINK))),
    _doc(_p(Text(text='docs', marks=BOLD, href='mailto:team@example.com'))),
    _doc(_p(Text(text='1 < 2 && 3 > 2 * 1 _ ~ `'))),
    _doc(_p(Text(text='line\nbreak\ttab'))),
    _doc(_p(Text(text='- not a list')), _p(Text(text='2. not ordered')), _p(Text(text='> not quoted'))),
    _doc(_p(Text(text='```'))),
    _doc(_p(Text(text='a')), _p(), _p(Text(text='b'))),
    _doc(BulletList(items=[_p(Text(text='one')), _p(Text(text='- two')), _p()])),
    _doc(OrderedList(items=[_p(Text(text='zero')), _p(Text(text='one'))], start=0)),
    _doc(OrderedList(items=[_p(Text(text='a'))], start=999_999)),
    _doc(OrderedList(items=[_p(Text(text='a'))], start=1), OrderedList(items=[_p(Text(text='b'))], start=7)),
    _doc(Blockquote(lines=[_p(Text(text='quoted '), UserMention(user_id='U1')), _p(), _p(Text(text=' indented'))])),
    _doc(CodeBlock(code='def f():\n    return a < b & `c`\n')),
    _doc(CodeBlock(code='')),
    _doc(CodeBlock(code='```')),
    _doc(
        _p(Text(text='Intro', marks=BOLD)),
        BulletList(items=[_p(ChannelMention(channel_id='C1', name='general'))]),
        CodeBlock(code='x'),
        Blockquote(lines=[_p(Text(text='q'))]),
        _p(Text(text='outro')),
    ),
]


class TestSerialize:
    """Tests for document serialization."""

    def test_mention_tokens(self):
        document = _doc(_p(Text(text='Hi '), UserMention(user_id='U1', display_name='alice'), Text(text='!')))
        assert serialize(document) == 'Hi <@U1|alice>!'

    def test_entities_without_labels(self):
        content = [
            UserMention(user_id='U1'),
            ChannelMention(channel_id='C1'),
            SpecialMention(kind=SpecialMentionKind.EVERYONE),
            Emoji(shortcode='wave'),
        ]
        assert serialize_inline(content) == '<@U1><#C1><!everyone><:wave>'

    def test_emoji_tokens(self):
        content = [
            Emoji(shortcode='tada', unicode='🎉'),
            Emoji(shortcode='parrot', image_url='https://e.example/p.gif'),
        ]
        assert serialize_inline(content) == '<:tada|🎉><:parrot|https://e.example/p.gif>'

    def test_marks_nest_bold_outermost(self):
        run = Text(text='x', marks={Mark.STRIKE, Mark.ITALIC, Mark.BOLD})
        assert serialize_inline([run]) == '*_~x~_*'

    def test_code_run(self):
        assert serialize_inline([Text(text='a<b*', marks={Mark.CODE})]) == '`a&lt;b*`'

    def test_links(self):
        assert serialize_inline([Text(text='docs', href='https://example.com')]) == '<https://example.com|docs>'
        assert serialize_inline([Text(text='https://example.com', href='https://example.com')]) == (
            '<https://example.com>'
        )

    def test_text_escaping(self):
        assert serialize_inline([Text(text='a & b < c > *d*')]) == 'a &amp; b &lt; c &gt; &#42;d&#42;'

    def test_line_marker_escaping(self):
        assert serialize(_doc(_p(Text(text='- x')))) == '&#45; x'
        assert serialize(_doc(_p(Text(text='12. x')))) == '12&#46; x'

    def test_blocks(self):
        document = _doc(
            BulletList(items=[_p(Text(text='a')), _p(Text(text='b'))]),
            OrderedList(items=[_p(Text(text='c')), _p(Text(text='d'))], start=3),
            Blockquote(lines=[_p(Text(text='q')), _p()]),
            CodeBlock(code='x<1\ny'),
        )
        assert serialize(document) == '- a\n- b\n3. c\n4. d\n> q\n>\n```\nx&lt;1\ny\n```'

    def test_serialization_is_normalized(self):
        split = _doc(_p(Text(text='he', marks=BOLD), Text(text='llo', marks=BOLD)))
        assert serialize(split) == '*hello*'

    def test_unknown_node_raises(self):
        with pytest.raises(TypeError):
            serialize_inline([object()])


class TestParse:
    """Tests for markup parsing."""

    def test_empty_input(self):
        assert parse('') == Document()
        assert parse(None) == Document()

    def test_delimiters(self):
        assert parse_inline('*bold* and _it_') == [
            Text(text='bold', marks=BOLD),
            Text(text=' and '),
            Text(text='it', marks=ITALIC),
        ]

    def test_entities(self):
        document = parse('<@U1|alice> <#C1|general> <!here> <:tada|🎉>')
        assert document.entities() == [
            UserMention(user_id='U1', display_name='alice'),
            ChannelMention(channel_id='C1', name='general'),
            SpecialMention(kind=SpecialMentionKind.HERE),
            Emoji(shortcode='tada', unicode='🎉'),
        ]

    def test_emoji_image_value(self):
        (emoji,) = parse('<:parrot|https://e.example/p.gif>').entities()
        assert emoji.image_url == 'https://e.example/p.gif'
        assert emoji.unicode is None

    def test_crlf_accepted(self):
        document = parse('a\r\nb')
        assert len(document.blocks) == 2

    def test_whitespace_preserved(self):
        assert parse('  hi  ').blocks[0].content == [Text(text='  hi  ')]

    def test_large_ordered_number_is_paragraph(self):
        document = parse('1000000. x')
        assert document.blocks == [_p(Text(text='1000000. x'))]

    def test_ordered_numbering_gap_starts_new_list(self):
        document = parse('1. a\n2. b\n5. c')
        assert [(block.start, len(block.items)) for block in document.blocks] == [(1, 2), (5, 1)]

    def test_code_block(self):
        document = parse('```\n*not bold*\n&lt;\n```')
        assert document.blocks == [CodeBlock(code='*not bold*\n<')]


class TestMalformedInput:
    """Malformed markup degrades to literal text."""

    @pytest.mark.parametrize(
        'markup,text',
        [
            ('a * b', 'a * b'),
            ('**', '**'),
            ('_open only', '_open only'),
            ('<foo>', '<foo>'),
            ('<@bad id>', '<@bad id>'),
            ('<!nobody>', '<!nobody>'),
            ('<relative|label>', '<relative|label>'),
            ('``', '``'),
            ('a < b', 'a < b'),
            ('&bogus; &#99999999; &#1114112;', '&bogus; &#99999999; &#1114112;'),
            ('&#128512; &nbsp;', '\U0001f600 \u00a0'),
        ],
    )
    def test_literal(self, markup, text):
        assert parse(markup).blocks == [_p(Text(text=text))]

    def test_unclosed_fence(self):
        document = parse('```\ncode')
        assert document.blocks == [_p(Text(text='```')), _p(Text(text='code'))]

    def test_crossed_delimiters(self):
        content = parse_inline('*a _b* c_')
        assert ''.join(node.text for node in content) == 'a b c'
        assert content[0] == Text(text='a ', marks=BOLD)


class TestRoundTrip:
    """Serialize/parse laws."""

    @pytest.mark.parametrize('document', ROUND_TRIP_DOCUMENTS)
    def test_parse_inverts_serialize(self, document):
        markup = serialize(document)
        assert parse(markup).structurally_equal(document), markup

    @pytest.mark.parametrize(
        'markup',
        [
            'plain',
            '*a _b* c_ ~~ <@U1|x> <nope> `unclosed',
            '- a\n-b\n1. c\n3. d\n>q\n> r\n```\nx',
            '&amp;&lt;&#42;&#10;',
            '\r\n\n  trailing  \n',
        ],
    )
    def test_reserialization_is_idempotent(self, markup):
        once = serialize(parse(markup))
        assert serialize(parse(once)) == once

    def test_escape_round_trip(self):
        text = '&<>*_~`\x00\n\t|plain'
        assert unescape(escape_text(text)) == text
