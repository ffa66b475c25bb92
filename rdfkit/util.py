"""Escaping, IRI and stream helpers shared by the readers and writers."""
import codecs
import io
import re
from itertools import zip_longest
from urllib.parse import urljoin, urlsplit

from rdfkit.exceptions import ReadWriteError, StructuralError

SCHEME = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*:')

_ECHAR_DECODE = {
    't': '\t',
    'b': '\b',
    'n': '\n',
    'r': '\r',
    'f': '\f',
    '"': '"',
    "'": "'",
    '\\': '\\',
}

_ECHAR_ENCODE = {
    '\t': '\\t',
    '\b': '\\b',
    '\n': '\\n',
    '\r': '\\r',
    '\f': '\\f',
    '"': '\\"',
    "'": "\\'",
    '\\': '\\\\',
}

_ESCAPES = re.compile(
    r'\\(?:u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8})|([tbnrf"\'\\]))')
_UCHARS = re.compile(r'\\(?:u([0-9A-Fa-f]{4})|U([0-9A-Fa-f]{8}))')
_LOCAL_ESCAPES = re.compile(r'\\(.)')

_NEEDS_ESCAPE = {
    '"': re.compile('[\x00-\x1f\x7f"\\\\\ud800-\udfff]'),
    "'": re.compile("[\x00-\x1f\x7f'\\\\\ud800-\udfff]"),
}


def _code_point(hex_digits):
    value = int(hex_digits, 16)
    if value > 0x10FFFF:
        raise StructuralError('Escape \\U%s is not a Unicode code point'
                              % hex_digits)
    return chr(value)


def decode_literal(string):
    """Undo ECHAR and UCHAR escapes in the body of a string literal.

    A single left-to-right pass, so ``\\\\u0041`` decodes to a backslash
    followed by ``u0041``.
    """
    def replace(match):
        uchar = match.group(1) or match.group(2)
        if uchar:
            return _code_point(uchar)
        return _ECHAR_DECODE[match.group(3)]
    return _ESCAPES.sub(replace, string)


def decode_iriref(string):
    """Undo UCHAR escapes in an IRIREF body (no angle brackets)."""
    return _UCHARS.sub(
        lambda match: _code_point(match.group(1) or match.group(2)), string)


def unescape_local_name(local):
    """Strip the backslash from PN_LOCAL_ESC sequences; %XX is left alone."""
    return _LOCAL_ESCAPES.sub(r'\1', local)


def escape_literal(value, quote='"'):
    """Escape ``value`` for the body of a short string literal.

    ``decode_literal(escape_literal(s)) == s`` for every ``s``.
    """
    def replace(match):
        char = match.group(0)
        if char in _ECHAR_ENCODE:
            return _ECHAR_ENCODE[char]
        return '\\u%04X' % ord(char)
    return _NEEDS_ESCAPE[quote].sub(replace, value)


def is_absolute_iri(iri):
    return bool(SCHEME.match(iri))


def smart_urljoin(base, url):
    """urljoin() that keeps an empty trailing fragment ("#") on ``url``."""
    joined = urljoin(base, url)
    if url.endswith('#') and not joined.endswith('#'):
        joined += '#'
    return joined


def relativize(base, iri):
    """Return a relative reference that resolves back to ``iri``, or None."""
    if not base or not iri.startswith(base) or iri == base:
        return None
    candidate = iri[len(base):]
    if is_absolute_iri(candidate) or candidate.startswith('//'):
        return None
    if smart_urljoin(base, candidate) != iri:
        return None
    if not urlsplit(base).scheme:
        return None
    return candidate


def read_source(source):
    """Read all of ``source`` as text.

    ``source`` may be a ``str``, ``bytes``, or a text or binary stream; bytes
    are decoded as UTF-8 and a leading byte order mark is dropped. The
    stream is not closed.
    """
    if hasattr(source, 'read'):
        try:
            data = source.read()
        except OSError as exc:
            raise ReadWriteError('Reading input failed: %s' % exc) from exc
    else:
        data = source
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode('utf-8')
        except UnicodeDecodeError as exc:
            raise ReadWriteError('Input is not valid UTF-8: %s' % exc) from exc
    if data.startswith('\ufeff'):
        data = data[1:]
    return data


def text_writer(stream):
    """Wrap binary streams so serializers can always write ``str``."""
    if isinstance(stream, io.TextIOBase):
        return stream
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)) \
            or 'b' in getattr(stream, 'mode', ''):
        return codecs.getwriter('utf-8')(stream)
    return stream


def grouper(iterable, n, fillvalue=None):
    "Collect data into fixed-length chunks or blocks"
    # grouper('ABCDEFG', 3, 'x') --> ABC DEF Gxx
    args = [iter(iterable)] * n
    return zip_longest(*args, fillvalue=fillvalue)
