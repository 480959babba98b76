"""Conversion of event descriptions into Notion blocks."""
import re
from typing import Dict, List, Optional
from urllib.parse import unquote

from bs4 import BeautifulSoup

# Notion rejects text objects longer than this
MAX_TEXT_LENGTH = 2000

CODE_LANGUAGES = {
    'bash', 'c', 'c#', 'c++', 'css', 'go', 'html', 'java', 'javascript',
    'json', 'kotlin', 'markdown', 'php', 'python', 'ruby', 'rust', 'shell',
    'sql', 'swift', 'typescript', 'xml', 'yaml'
}

HTML_TAG_NAMES = r'(?:br|p|div|span|a|b|strong|i|em|ul|ol|li|h[1-6])'
HTML_TAG = re.compile(rf'</?{HTML_TAG_NAMES}(?:\s[^>]*)?/?>', re.IGNORECASE)
# Angle brackets that do not open a known tag, e.g. "Jane <jane@example.com>"
STRAY_BRACKET = re.compile(rf'<(?!/?{HTML_TAG_NAMES}(?:\s[^>]*)?/?>)', re.IGNORECASE)
FENCE = re.compile(r'^\s*```\s*([\w+#-]*)\s*$')
RULE = re.compile(r'^\s*([-*_])(\s*\1){2,}\s*$')
HEADING = re.compile(r'^\s*(#{1,6})\s+(.*?)\s*#*\s*$')
TODO = re.compile(r'^\s*[-*+]\s+\[([ xX])\]\s+(.*)$')
BULLET = re.compile(r'^\s*[-*+]\s+(.*)$')
NUMBERED = re.compile(r'^\s*\d+[.)]\s+(.*)$')
QUOTE = re.compile(r'^\s*>\s?(.*)$')
LINK_URL = re.compile(r'^(https?://|mailto:)')
INLINE = re.compile(
    r'\[(?P<link_text>[^\]]+)\]\((?P<link_url>[^)\s]+)\)'
    r'|`(?P<code>[^`]+)`'
    r'|\*\*(?P<bold>.+?)\*\*'
    r'|__(?P<bold_alt>.+?)__'
    r'|~~(?P<strike>.+?)~~'
    r'|\*(?P<italic>[^*\s][^*]*?)\*'
    r'|(?<!\w)_(?P<italic_alt>[^_\s][^_]*?)_(?!\w)'
)


def parse_description(description: str) -> str:
    """URL-unescape a description and turn literal \\n sequences into newlines."""
    return unquote(description).replace('\\n', '\n')


def transform_description(description: Optional[str]) -> List[Dict]:
    """
    Convert a raw event description into Notion blocks.

    Args:
        description: DESCRIPTION value of the event, possibly None

    Returns:
        List of Notion block objects, empty when there is no description
    """
    text = parse_description(description) if description else ''
    if HTML_TAG.search(text):
        text = html_to_text(text)
    return markdown_to_blocks(text)


def html_to_text(html: str) -> str:
    """
    Flatten an HTML description into markdown-like text.

    Line breaks and block elements become newlines, links become
    [text](href) and bold/italic markup becomes ** and _. Angle
    brackets that do not belong to a known tag are kept as text.
    """
    soup = BeautifulSoup(STRAY_BRACKET.sub('&lt;', html), 'html.parser')

    for br in soup.find_all('br'):
        br.replace_with('\n')
    for link in soup.find_all('a'):
        label = link.get_text()
        href = link.get('href')
        link.replace_with(f'[{label}]({href})' if href and label else label or href or '')
    for tag in soup.find_all(['b', 'strong']):
        tag.insert(0, '**')
        tag.append('**')
    for tag in soup.find_all(['i', 'em']):
        tag.insert(0, '_')
        tag.append('_')
    for item in soup.find_all('li'):
        item.insert(0, '- ')
        item.append('\n')
    for tag in soup.find_all(['p', 'div', 'ul', 'ol', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6']):
        tag.append('\n')

    return soup.get_text()


def markdown_to_blocks(text: str) -> List[Dict]:
    """
    Convert markdown-like text into a sequence of Notion blocks.

    Supports headings, bulleted, numbered and to-do list items, block
    quotes, fenced code, horizontal rules and paragraphs. Consecutive
    lines of a paragraph are kept as one block joined by newlines.

    Args:
        text: Markdown text

    Returns:
        List of Notion block objects
    """
    blocks: List[Dict] = []
    paragraph: List[str] = []
    lines = text.splitlines()
    index = 0

    while index < len(lines):
        line = lines[index]

        fence = FENCE.match(line)
        if fence:
            _flush_paragraph(blocks, paragraph)
            code_lines = []
            index += 1
            while index < len(lines) and not FENCE.match(lines[index]):
                code_lines.append(lines[index])
                index += 1
            blocks.append(_code_block('\n'.join(code_lines), fence.group(1)))
            index += 1
            continue

        if QUOTE.match(line):
            _flush_paragraph(blocks, paragraph)
            quote_lines = []
            while index < len(lines) and QUOTE.match(lines[index]):
                quote_lines.append(QUOTE.match(lines[index]).group(1))
                index += 1
            blocks.append(_block('quote', '\n'.join(quote_lines)))
            continue

        if not line.strip():
            _flush_paragraph(blocks, paragraph)
        else:
            block = _line_block(line)
            if block:
                _flush_paragraph(blocks, paragraph)
                blocks.append(block)
            else:
                paragraph.append(line.strip())
        index += 1

    _flush_paragraph(blocks, paragraph)
    return blocks


def rich_text(text: str) -> List[Dict]:
    """
    Convert inline markdown into Notion rich text objects.

    Args:
        text: Single block of text with inline markup

    Returns:
        List of rich text objects with annotations and links applied
    """
    items: List[Dict] = []
    position = 0

    for match in INLINE.finditer(text):
        if match.start() > position:
            items.extend(_text_items(text[position:match.start()]))

        if match.group('link_text') is not None:
            url = match.group('link_url')
            items.extend(_text_items(
                match.group('link_text'),
                link=url if LINK_URL.match(url) else None
            ))
        elif match.group('code') is not None:
            items.extend(_text_items(match.group('code'), {'code': True}))
        elif match.group('bold') is not None or match.group('bold_alt') is not None:
            items.extend(_text_items(
                match.group('bold') or match.group('bold_alt'), {'bold': True}
            ))
        elif match.group('strike') is not None:
            items.extend(_text_items(match.group('strike'), {'strikethrough': True}))
        else:
            items.extend(_text_items(
                match.group('italic') or match.group('italic_alt'), {'italic': True}
            ))

        position = match.end()

    if position < len(text):
        items.extend(_text_items(text[position:]))

    return items


def _line_block(line: str) -> Optional[Dict]:
    """Build the block for a single-line construct, or None for paragraph text."""
    if RULE.match(line):
        return {'object': 'block', 'type': 'divider', 'divider': {}}

    heading = HEADING.match(line)
    if heading:
        level = min(len(heading.group(1)), 3)
        return _block(f'heading_{level}', heading.group(2))

    todo = TODO.match(line)
    if todo:
        return _block('to_do', todo.group(2), checked=todo.group(1).lower() == 'x')

    bullet = BULLET.match(line)
    if bullet:
        return _block('bulleted_list_item', bullet.group(1))

    numbered = NUMBERED.match(line)
    if numbered:
        return _block('numbered_list_item', numbered.group(1))

    return None


def _flush_paragraph(blocks: List[Dict], paragraph: List[str]) -> None:
    if paragraph:
        blocks.append(_block('paragraph', '\n'.join(paragraph)))
        paragraph.clear()


def _block(block_type: str, text: str, **extra) -> Dict:
    body = {'rich_text': rich_text(text)}
    body.update(extra)
    return {'object': 'block', 'type': block_type, block_type: body}


def _code_block(code: str, language: str) -> Dict:
    language = language.lower()
    return {
        'object': 'block',
        'type': 'code',
        'code': {
            'rich_text': _text_items(code),
            'language': language if language in CODE_LANGUAGES else 'plain text'
        }
    }


def _text_items(
    content: str,
    annotations: Optional[Dict] = None,
    link: Optional[str] = None
) -> List[Dict]:
    """Build text objects for content, split at the Notion length limit."""
    items = []
    for start in range(0, len(content), MAX_TEXT_LENGTH):
        text = {'content': content[start:start + MAX_TEXT_LENGTH]}
        if link:
            text['link'] = {'url': link}
        item = {'type': 'text', 'text': text}
        if annotations:
            item['annotations'] = annotations
        items.append(item)
    return items
