"""Unit tests for description transformation."""
from processor.description_transformer import (
    MAX_TEXT_LENGTH,
    html_to_text,
    markdown_to_blocks,
    parse_description,
    rich_text,
    transform_description,
)


def block_text(block):
    """Concatenate the plain content of a block's rich text."""
    body = block[block['type']]
    return ''.join(item['text']['content'] for item in body['rich_text'])


class TestParseDescription:
    """Test cases for description unescaping."""

    def test_escaped_newlines_become_line_breaks(self):
        """Test literal backslash-n sequences are converted to newlines."""
        assert parse_description('Line one\\nLine two') == 'Line one\nLine two'

    def test_url_escapes_are_decoded(self):
        """Test percent-encoded characters are decoded."""
        assert parse_description('Room%20A%3A%20floor%202') == 'Room A: floor 2'

    def test_plain_text_unchanged(self):
        """Test text without escapes is returned unchanged."""
        assert parse_description('Just text') == 'Just text'


class TestTransformDescription:
    """Test cases for transform_description."""

    def test_absent_description_yields_no_blocks(self):
        """Test None and empty descriptions produce an empty body."""
        assert transform_description(None) == []
        assert transform_description('') == []

    def test_escaped_newlines_reflected_in_body(self):
        """Test escaped newlines show up as real line breaks in the body."""
        blocks = transform_description('Agenda\\nNotes\\nWrap-up')

        assert len(blocks) == 1
        assert blocks[0]['type'] == 'paragraph'
        assert block_text(blocks[0]) == 'Agenda\nNotes\nWrap-up'

    def test_html_description_is_flattened(self):
        """Test HTML descriptions are converted before markdown parsing."""
        blocks = transform_description(
            'Join us<br>See <a href="https://example.com/agenda">the agenda</a>'
        )

        assert len(blocks) == 1
        items = blocks[0]['paragraph']['rich_text']
        assert items[0]['text']['content'] == 'Join us\nSee '
        assert items[1]['text']['content'] == 'the agenda'
        assert items[1]['text']['link'] == {'url': 'https://example.com/agenda'}

    def test_email_in_angle_brackets_is_kept(self):
        """Test plain-text angle brackets around an address are not treated as HTML."""
        blocks = transform_description('Organizer: Jane Doe <jane@example.com>\\nRoom 4')

        assert len(blocks) == 1
        assert block_text(blocks[0]) == 'Organizer: Jane Doe <jane@example.com>\nRoom 4'

    def test_placeholder_in_angle_brackets_is_kept(self):
        """Test bracketed placeholders survive the transformation."""
        blocks = transform_description('Bring <your laptop> and charger')

        assert block_text(blocks[0]) == 'Bring <your laptop> and charger'

    def test_html_description_keeps_stray_brackets(self):
        """Test non-tag brackets inside an HTML description are kept as text."""
        blocks = transform_description('Organizer: Jane <jane@example.com><br>Room 4')

        assert block_text(blocks[0]) == 'Organizer: Jane <jane@example.com>\nRoom 4'


class TestMarkdownToBlocks:
    """Test cases for markdown_to_blocks."""

    def test_empty_text(self):
        """Test empty text produces no blocks."""
        assert markdown_to_blocks('') == []
        assert markdown_to_blocks('\n\n') == []

    def test_paragraphs_split_on_blank_lines(self):
        """Test blank lines separate paragraphs."""
        blocks = markdown_to_blocks('First\nstill first\n\nSecond')

        assert [block['type'] for block in blocks] == ['paragraph', 'paragraph']
        assert block_text(blocks[0]) == 'First\nstill first'
        assert block_text(blocks[1]) == 'Second'

    def test_headings(self):
        """Test heading levels map to Notion heading blocks."""
        blocks = markdown_to_blocks('# One\n## Two\n### Three\n#### Four')

        assert [block['type'] for block in blocks] == [
            'heading_1', 'heading_2', 'heading_3', 'heading_3'
        ]
        assert block_text(blocks[0]) == 'One'
        assert block_text(blocks[3]) == 'Four'

    def test_list_items(self):
        """Test bulleted, numbered and to-do items."""
        blocks = markdown_to_blocks(
            '- apples\n* pears\n1. first\n2) second\n- [ ] open\n- [x] done'
        )

        assert [block['type'] for block in blocks] == [
            'bulleted_list_item', 'bulleted_list_item',
            'numbered_list_item', 'numbered_list_item',
            'to_do', 'to_do'
        ]
        assert block_text(blocks[0]) == 'apples'
        assert block_text(blocks[3]) == 'second'
        assert blocks[4]['to_do']['checked'] is False
        assert blocks[5]['to_do']['checked'] is True
        assert block_text(blocks[5]) == 'done'

    def test_quote_lines_grouped(self):
        """Test consecutive quote lines form a single quote block."""
        blocks = markdown_to_blocks('> first\n> second\nafter')

        assert [block['type'] for block in blocks] == ['quote', 'paragraph']
        assert block_text(blocks[0]) == 'first\nsecond'

    def test_fenced_code(self):
        """Test fenced code blocks keep their content verbatim."""
        blocks = markdown_to_blocks('```python\nprint("**hi**")\n```\nafter')

        assert blocks[0]['type'] == 'code'
        assert blocks[0]['code']['language'] == 'python'
        assert block_text(blocks[0]) == 'print("**hi**")'
        assert 'annotations' not in blocks[0]['code']['rich_text'][0]
        assert blocks[1]['type'] == 'paragraph'

    def test_unknown_code_language_falls_back(self):
        """Test unsupported fence languages use plain text."""
        blocks = markdown_to_blocks('```brainfuck\n+++\n```')

        assert blocks[0]['code']['language'] == 'plain text'

    def test_horizontal_rule(self):
        """Test horizontal rules become dividers."""
        blocks = markdown_to_blocks('above\n\n---\n\nbelow')

        assert [block['type'] for block in blocks] == ['paragraph', 'divider', 'paragraph']


class TestRichText:
    """Test cases for inline markup conversion."""

    def test_inline_annotations(self):
        """Test bold, italic, strikethrough and code spans."""
        items = rich_text('a **b** _c_ ~~d~~ `e`')

        contents = [item['text']['content'] for item in items]
        assert contents == ['a ', 'b', ' ', 'c', ' ', 'd', ' ', 'e']
        assert items[1]['annotations'] == {'bold': True}
        assert items[3]['annotations'] == {'italic': True}
        assert items[5]['annotations'] == {'strikethrough': True}
        assert items[7]['annotations'] == {'code': True}

    def test_links(self):
        """Test markdown links carry their URL."""
        items = rich_text('see [docs](https://example.com/docs)')

        assert items[1]['text'] == {
            'content': 'docs',
            'link': {'url': 'https://example.com/docs'}
        }

    def test_relative_links_are_plain_text(self):
        """Test links Notion would reject are kept as text only."""
        items = rich_text('[docs](/docs)')

        assert items == [{'type': 'text', 'text': {'content': 'docs'}}]

    def test_long_text_is_split(self):
        """Test text longer than the Notion limit is split into segments."""
        items = rich_text('x' * (MAX_TEXT_LENGTH + 10))

        assert len(items) == 2
        assert len(items[0]['text']['content']) == MAX_TEXT_LENGTH
        assert len(items[1]['text']['content']) == 10

    def test_snake_case_not_italic(self):
        """Test underscores inside words are left alone."""
        items = rich_text('call my_function_name now')

        assert items == [{'type': 'text', 'text': {'content': 'call my_function_name now'}}]


class TestHtmlToText:
    """Test cases for HTML flattening."""

    def test_list_and_emphasis(self):
        """Test list items and emphasis are converted to markdown."""
        text = html_to_text('<ul><li>one</li><li><b>two</b></li></ul>')

        blocks = markdown_to_blocks(text)
        assert [block['type'] for block in blocks] == ['bulleted_list_item', 'bulleted_list_item']
        assert blocks[1]['bulleted_list_item']['rich_text'][0]['annotations'] == {'bold': True}
