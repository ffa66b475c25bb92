from collections import namedtuple

from rdfkit.parsers.lark.base import LarkParser
from rdfkit.parsers.lark.turtle import TurtleTransformer, turtle_lark

# The triples written inside one pair of braces.
GraphBlock = namedtuple('GraphBlock', ['statements'])


class TriGTransformer(TurtleTransformer):
    """Turtle lowering plus graph blocks; produces quads."""

    def in_graph(self, triples, graph):
        return [self.make_quad(t.subject, t.predicate, t.object, graph)
                for t in triples]

    def wrapped_graph(self, children):
        return GraphBlock([triple for statements in children
                           for triple in statements])

    def named_graph(self, children):
        label, block = children
        return self.in_graph(block.statements, label)

    def triples_or_graph(self, children):
        label, rest = children
        if isinstance(rest, GraphBlock):
            return self.in_graph(rest.statements, label)
        statements = self.take_pending()
        statements.extend(self.unpack_predicate_object_list(label, rest))
        return self.in_graph(statements, None)

    def triples2(self, children):
        return self.in_graph(self.triples(children), None)

    def trig_doc(self, children):
        quads = []
        for child in children:
            if isinstance(child, GraphBlock):
                quads.extend(self.in_graph(child.statements, None))
            else:
                quads.extend(child)
        return quads


class TriGParser(LarkParser):
    NAME = 'TriG'
    FILE_EXTENSION = 'trig'
    MIME_TYPE = 'application/trig'
    quads = True
    lark = turtle_lark
    start = 'trig_doc'
    lowering = TriGTransformer


trig_parser = TriGParser()


def parse(string_or_stream, dataset=None, base=None):
    return trig_parser.parse(string_or_stream, dataset, base)
