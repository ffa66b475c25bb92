import logging

from lark import Lark, Token, Transformer, Tree
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
    VisitError,
)

from rdfkit.exceptions import ParseError, ResourceExhausted
from rdfkit.grammars import loader
from rdfkit.parsers.base import BaseParser, TermFactory

log = logging.getLogger(__name__)


def compile_grammar(grammar, start, **options):
    """Build a shared, read-only LALR parser for one of the text syntaxes."""
    return Lark(grammar, start=start, parser='lalr', import_paths=[loader],
                maybe_placeholders=False, **options)


def tree_depth(tree, limit):
    """Height of ``tree``, counted without recursion.

    Stops and returns as soon as ``limit`` is exceeded, along with the node
    where that happened.
    """
    deepest = 0
    stack = [(tree, 1)]
    while stack:
        node, depth = stack.pop()
        if depth > limit:
            return depth, node
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in node.children
                     if isinstance(child, Tree))
    return deepest, None


def _first_token(tree):
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, Token):
            return node
        stack.extend(reversed(node.children))
    return None


def _end_position(text):
    return text.count('\n') + 1, len(text) - text.rfind('\n')


class RDFTransformer(TermFactory, Transformer):
    """A bottom-up lowering from a lark parse tree to statements."""

    def __init__(self, parser, sink, base=None):
        TermFactory.__init__(self, parser, sink, base)
        Transformer.__init__(self)

    def lower(self, tree):
        return self.transform(tree)


class LarkParser(BaseParser):
    """Drives one start symbol of a compiled grammar.

    Subclasses set ``lark``, ``start`` and ``lowering``: a class built with
    ``(parser, sink, base)`` whose ``lower(tree)`` returns the statements.
    """
    lark = None
    start = None
    lowering = None

    def _parse_statements(self, text, sink, base):
        tree = self._parse_tree(text)
        depth, node = tree_depth(tree, self.max_depth)
        if node is not None:
            token = _first_token(node)
            raise ResourceExhausted(
                'Nesting deeper than %d levels' % self.max_depth,
                getattr(token, 'line', None), getattr(token, 'column', None))
        log.debug('%s parse tree is %d levels deep', self.NAME, depth)

        lowering = self.lowering(self, sink, base)
        try:
            statements = lowering.lower(tree)
        except VisitError as exc:
            raise exc.orig_exc
        return statements, lowering.prefixes

    def _parse_tree(self, text):
        try:
            return self.lark.parse(text, start=self.start)
        except UnexpectedInput as exc:
            raise self._syntax_error(exc, text)

    def _describe(self, names):
        described = set()
        for name in names or ():
            try:
                pattern = self.lark.get_terminal(name).pattern
            except KeyError:
                described.add(name)
                continue
            if pattern.type == 'str':
                described.add(repr(pattern.value))
            else:
                described.add(name)
        return described

    def _syntax_error(self, exc, text):
        line, column = getattr(exc, 'line', -1), getattr(exc, 'column', -1)
        if isinstance(exc, UnexpectedToken):
            if exc.token.type == '$END':
                found = 'end of input'
            else:
                found = repr(str(exc.token))
            expected = self._describe(exc.expected)
        elif isinstance(exc, UnexpectedCharacters):
            found = repr(exc.char)
            expected = self._describe(exc.allowed)
        elif isinstance(exc, UnexpectedEOF):
            found = 'end of input'
            expected = self._describe(exc.expected)
        else:
            found = None
            expected = set()
        if line is None or line < 1:
            line, column = _end_position(text)
        message = 'Unexpected %s in %s' % (found, self.NAME)
        if expected:
            message += '; expected one of %s' % ', '.join(sorted(expected))
        return ParseError(message, line, column, expected, found)
