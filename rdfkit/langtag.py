"""BCP 47 (RFC 5646) language tags.

Tags are parsed into their subtags, keep the case they were written with, and
compare case-insensitively.
"""
from collections import namedtuple
import re

from rdfkit.exceptions import StructuralError

IRREGULAR_GRANDFATHERED = frozenset((
    'en-gb-oed', 'i-ami', 'i-bnn', 'i-default', 'i-enochian', 'i-hak',
    'i-klingon', 'i-lux', 'i-mingo', 'i-navajo', 'i-pwn', 'i-tao', 'i-tay',
    'i-tsu', 'sgn-be-fr', 'sgn-be-nl', 'sgn-ch-de',
))

REGULAR_GRANDFATHERED = frozenset((
    'art-lojban', 'cel-gaulish', 'no-bok', 'no-nyn', 'zh-guoyu', 'zh-hakka',
    'zh-min', 'zh-min-nan', 'zh-xiang',
))

LANGTAG = re.compile(r'''
    ^(?P<language>[a-z]{2,3}(?:-(?P<extlang>[a-z]{3}(?:-[a-z]{3}){0,2}))?
                 |[a-z]{4}
                 |[a-z]{5,8})
    (?:-(?P<script>[a-z]{4}))?
    (?:-(?P<region>[a-z]{2}|[0-9]{3}))?
    (?P<variants>(?:-(?:[a-z0-9]{5,8}|[0-9][a-z0-9]{3}))*)
    (?P<extensions>(?:-[0-9a-wy-z](?:-[a-z0-9]{2,8})+)*)
    (?:-x(?P<privateuse>(?:-[a-z0-9]{1,8})+))?$
''', re.IGNORECASE | re.VERBOSE)

PRIVATEUSE = re.compile(r'^x((?:-[a-z0-9]{1,8})+)$', re.IGNORECASE)

Extension = namedtuple('Extension', ['singleton', 'subtags'])


def _subtags(text):
    return tuple(part for part in text.split('-') if part)


class LanguageTag(namedtuple('LanguageTag', [
        'tag', 'language', 'extlang', 'script', 'region', 'variants',
        'extensions', 'private_use'])):
    """A parsed language tag.

    Grandfathered tags only set ``tag``; private-use tags (``x-...``) only
    set ``tag`` and ``private_use``.
    """
    __slots__ = ()

    @classmethod
    def parse(cls, tag):
        lowered = tag.lower()
        if lowered in IRREGULAR_GRANDFATHERED or \
                lowered in REGULAR_GRANDFATHERED:
            return cls(tag, None, (), None, None, (), (), ())

        match = PRIVATEUSE.match(tag)
        if match:
            return cls(tag, None, (), None, None, (), (),
                       _subtags(match.group(1)))

        match = LANGTAG.match(tag)
        if not match:
            raise StructuralError('Malformed language tag %r' % (tag,))

        variants = _subtags(match.group('variants'))
        if len(set(v.lower() for v in variants)) != len(variants):
            raise StructuralError('Repeated variant in language tag %r'
                                  % (tag,))

        extensions = []
        for subtag in _subtags(match.group('extensions')):
            if len(subtag) == 1:
                if any(ext.singleton.lower() == subtag.lower()
                       for ext in extensions):
                    raise StructuralError(
                        'Repeated extension %r in language tag %r'
                        % (subtag, tag))
                extensions.append(Extension(subtag, ()))
            else:
                last = extensions[-1]
                extensions[-1] = Extension(last.singleton,
                                           last.subtags + (subtag,))

        language = match.group('language')
        extlang = match.group('extlang')
        if extlang:
            language = language[:-(len(extlang) + 1)]
        return cls(tag, language, _subtags(extlang or ''),
                   match.group('script'), match.group('region'), variants,
                   tuple(extensions),
                   _subtags(match.group('privateuse') or ''))

    @property
    def is_grandfathered(self):
        return self.tag.lower() in IRREGULAR_GRANDFATHERED or \
            self.tag.lower() in REGULAR_GRANDFATHERED

    @property
    def is_private_use(self):
        return self.language is None and bool(self.private_use)

    def __str__(self):
        return self.tag

    def __eq__(self, other):
        if isinstance(other, LanguageTag):
            return self.tag.lower() == other.tag.lower()
        if isinstance(other, str):
            return self.tag.lower() == other.lower()
        return NotImplemented

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self.tag.lower())


def is_valid(tag):
    try:
        LanguageTag.parse(tag)
    except StructuralError:
        return False
    return True
