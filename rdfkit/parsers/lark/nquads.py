from rdfkit.parsers.lark.base import LarkParser
from rdfkit.parsers.lark.ntriples import NTriplesTransformer, nt_lark


class NQuadsTransformer(NTriplesTransformer):
    """N-Triples plus an optional fourth term naming the graph."""

    def quad(self, children):
        if len(children) == 4:
            subject, predicate, object_, graph = children
        else:
            subject, predicate, object_ = children
            graph = None
        return self.make_quad(subject, predicate, object_, graph)

    def nquads_doc(self, children):
        return children


class NQuadsParser(LarkParser):
    NAME = 'N-Quads'
    FILE_EXTENSION = 'nq'
    MIME_TYPE = 'application/n-quads'
    quads = True
    lark = nt_lark
    start = 'nquads_doc'
    lowering = NQuadsTransformer


nquads_parser = NQuadsParser()


def parse(string_or_stream, dataset=None):
    return nquads_parser.parse(string_or_stream, dataset)
