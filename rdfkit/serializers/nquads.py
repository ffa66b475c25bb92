from rdfkit.serializers.base import NTriplesTerms, check_statement, quads_of
from rdfkit.serializers.ntriples import NTriplesSerializer


class NQuadsSerializer(NTriplesSerializer):
    """N-Triples with the graph name, if any, as a fourth term."""
    NAME = 'N-Quads'
    FILE_EXTENSION = 'nq'
    MIME_TYPE = 'application/n-quads'

    def _write(self, graph, out, prefixes):
        term = NTriplesTerms(self.star, self.max_depth)
        for quad in quads_of(graph):
            check_statement(quad)
            terms = [term(t) for t in quad[:3]]
            if quad.graph is not None:
                terms.append(term(quad.graph))
            out.write('%s .\n' % ' '.join(terms))
