from collections import Counter

from rdfkit.primitives import BlankNode, Dataset
from rdfkit.serializers.base import check_statement
from rdfkit.serializers.turtle import TurtleSerializer, collect_blank_nodes


def graph_blocks(graph):
    """(name, triples) for the default graph and each non-empty named graph."""
    if isinstance(graph, Dataset):
        blocks = [(None, list(graph.default_graph))]
        blocks.extend((named.name, list(named))
                      for named in graph.named_graphs())
        return blocks
    return [(graph.name, list(graph))]


def shared_blank_nodes(blocks):
    """Blank nodes that have to keep a label: graph names and nodes used in
    more than one graph."""
    seen = Counter()
    pinned = set()
    for name, triples in blocks:
        if isinstance(name, BlankNode):
            pinned.add(name)
        nodes = set()
        for triple in triples:
            collect_blank_nodes(triple, nodes)
        seen.update(nodes)
    pinned.update(node for node, count in seen.items() if count > 1)
    return pinned


class TriGSerializer(TurtleSerializer):
    NAME = 'TriG'
    FILE_EXTENSION = 'trig'
    MIME_TYPE = 'application/trig'

    def _write(self, graph, out, prefixes):
        blocks = [(name, [check_statement(t) for t in triples])
                  for name, triples in graph_blocks(graph)]
        pinned = shared_blank_nodes(blocks)
        cursor = self.cursor_class(self, prefixes)
        out.write(cursor.header())
        sections = []
        for name, triples in blocks:
            if name is None:
                if triples:
                    sections.append(cursor.block(triples, pinned))
            else:
                sections.append('%s {\n%s}\n' % (
                    cursor.term(name), cursor.block(triples, pinned, 1)))
        out.write('\n'.join(sections))
