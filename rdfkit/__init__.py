"""rdfkit: RDF terms, graphs and datasets, with readers and writers for
N-Triples, N-Quads, Turtle, TriG, N3 and RDF/JSON."""

__version__ = '0.1.0'
