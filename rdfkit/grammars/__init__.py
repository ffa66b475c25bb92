"""Shared lexical grammar for the text syntaxes.

``terms.lark`` holds the token productions once. Format grammars import them
through :data:`loader`, and Python code that needs to recognise the same
tokens (the writers deciding whether a literal can be written bare, the
prefix map deciding whether a local name is legal) asks for the compiled
pattern with :func:`terminal_regex`.
"""
import re

from lark import Lark
from lark.load_grammar import FromPackageLoader

loader = FromPackageLoader(__name__)

LEXICON_TERMINALS = (
    'BLANK_NODE_LABEL',
    'BOOLEAN',
    'DECIMAL',
    'DOUBLE',
    'INTEGER',
    'LANGTAG',
    'PN_LOCAL',
    'PN_PREFIX',
)

_lexicon = Lark(
    'start: %s\n%%import terms (%s)\n' % (
        ' | '.join(LEXICON_TERMINALS), ', '.join(LEXICON_TERMINALS)),
    parser='lalr',
    lexer='basic',
    import_paths=[loader],
)

_compiled = {}


def terminal_regex(name):
    """Return a compiled regex that fully matches the shared terminal ``name``.

    Use ``.fullmatch(text)`` on the result.
    """
    try:
        return _compiled[name]
    except KeyError:
        pattern = _lexicon.get_terminal(name).pattern.to_regexp()
        regex = _compiled[name] = re.compile(pattern)
        return regex
