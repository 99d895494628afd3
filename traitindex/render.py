"""
Plain-text rendering of implementor descriptions for terminal output.
"""
import html
import re


_TAG_RE = re.compile(r'<[^>]+>')
_BREAK_RE = re.compile(r'<br\s*/?>', re.IGNORECASE)
_SPACE_RE = re.compile(r'\s+')


def plain_text(description: str) -> str:
    """
    Strip markup from a rendered impl header.

    Args:
        description: e.g. ``impl&lt;T&gt; <a ...>Service</a> for <a ...>Client</a>&lt;T&gt;``

    Returns:
        e.g. ``impl<T> Service for Client<T>``
    """
    text = _BREAK_RE.sub(' ', description)
    text = _TAG_RE.sub('', text)
    text = html.unescape(text).replace('\xa0', ' ')
    return _SPACE_RE.sub(' ', text).strip()
