from rdfkit.serializers.base import (
    DEFAULT_MAX_DEPTH,
    BaseSerializer,
    NTriplesTerms,
    check_statement,
    default_graph,
)


class NTriplesSerializer(BaseSerializer):
    """One triple per line; ``star=True`` allows ``<< s p o >>`` terms."""
    NAME = 'N-Triples'
    FILE_EXTENSION = 'nt'
    MIME_TYPE = 'application/n-triples'

    def __init__(self, star=False, max_depth=DEFAULT_MAX_DEPTH):
        self.star = star
        self.max_depth = max_depth

    def _write(self, graph, out, prefixes):
        term = NTriplesTerms(self.star, self.max_depth)
        for triple in default_graph(graph, self.NAME):
            check_statement(triple)
            out.write('%s %s %s .\n' % tuple(term(t) for t in triple))
