import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rdfkit.cli import main
from rdfkit.exceptions import UnsupportedFormat
from rdfkit.formats import Format
from rdfkit.primitives import Dataset, NamedNode, Quad, Triple

EX = 'http://example.org/'
TRIPLE = '<http://example.org/s> <http://example.org/p> "v" .\n'


class TestFormat(unittest.TestCase):

    def test_from_name(self):
        self.assertIs(Format.from_name('ttl'), Format.TURTLE)
        self.assertIs(Format.from_name('Turtle'), Format.TURTLE)
        self.assertIs(Format.from_name('N-Quads'), Format.NQUADS)
        self.assertIs(Format.from_name('graphviz'), Format.DOT)
        self.assertIs(Format.from_name('json'), Format.RDF_JSON)
        with self.assertRaises(UnsupportedFormat):
            Format.from_name('yaml')

    def test_from_extension_and_path(self):
        self.assertIs(Format.from_extension('.trig'), Format.TRIG)
        self.assertIs(Format.from_extension('NT'), Format.NTRIPLES)
        self.assertIs(Format.from_path('data/people.n3'), Format.N3)
        self.assertIs(Format.from_path(Path('graph.dot')), Format.DOT)
        with self.assertRaises(UnsupportedFormat):
            Format.from_path('README')
        with self.assertRaises(UnsupportedFormat):
            Format.from_path('notes.txt')

    def test_from_mime_type(self):
        self.assertIs(Format.from_mime_type('text/turtle; charset=utf-8'),
                      Format.TURTLE)
        self.assertIs(Format.from_mime_type('application/n-quads'),
                      Format.NQUADS)
        with self.assertRaises(UnsupportedFormat):
            Format.from_mime_type('text/html')

    def test_capabilities(self):
        self.assertTrue(Format.TURTLE.readable)
        self.assertTrue(Format.DOT.writable)
        self.assertFalse(Format.DOT.readable)
        self.assertFalse(Format.RDF_XML.readable)
        self.assertFalse(Format.JSON_LD.writable)

    def test_placeholders_raise(self):
        with self.assertRaises(UnsupportedFormat):
            Format.RDF_XML.read('<rdf:RDF/>')
        with self.assertRaises(UnsupportedFormat):
            Format.DOT.reader()
        with self.assertRaises(UnsupportedFormat):
            Format.JSON_LD.writer()

    def test_read_and_write(self):
        graph = Format.NTRIPLES.read(TRIPLE.encode('utf-8'))
        self.assertEqual(len(graph), 1)
        out = io.StringIO()
        Format.TURTLE.write(graph, out, prefixes={'ex': EX})
        self.assertEqual(out.getvalue(),
                         '@prefix ex: <http://example.org/> .\n\n'
                         'ex:s ex:p "v" .\n')

    def test_quad_formats_read_datasets(self):
        dataset = Format.NQUADS.read(
            '<http://example.org/s> <http://example.org/p> '
            '<http://example.org/o> <http://example.org/g> .\n')
        self.assertIsInstance(dataset, Dataset)
        self.assertIn(Quad(NamedNode(EX + 's'), NamedNode(EX + 'p'),
                           NamedNode(EX + 'o'), NamedNode(EX + 'g')),
                      dataset)

    def test_base_argument(self):
        graph = Format.TURTLE.read('<s> <p> <o> .', base=EX)
        self.assertEqual(list(graph), [Triple(
            NamedNode(EX + 's'), NamedNode(EX + 'p'), NamedNode(EX + 'o'))])


class TestCommandLine(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.stderr = io.StringIO()
        patcher = mock.patch('sys.stderr', self.stderr)
        patcher.start()
        self.addCleanup(patcher.stop)

    def path(self, name, content=None):
        path = os.path.join(self.tmp.name, name)
        if content is not None:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content)
        return path

    def read(self, path):
        with open(path, encoding='utf-8') as f:
            return f.read()

    def test_convert_files(self):
        source = self.path('in.ttl', '@prefix ex: <http://example.org/> .\n'
                                     'ex:s ex:p "v" .\n')
        target = self.path('out.nt')
        self.assertEqual(main([source, target]), 0)
        self.assertEqual(self.read(target), TRIPLE)

    def test_explicit_formats_override_extensions(self):
        source = self.path('in.txt', TRIPLE)
        target = self.path('out.txt')
        self.assertEqual(main(['--from', 'ntriples', '--to', 'turtle',
                               '--sparql-style', source, target]), 0)
        self.assertEqual(self.read(target),
                         '<http://example.org/s> <http://example.org/p> "v" .\n')

    def test_input_file_is_default_base(self):
        source = self.path('in.ttl', '<a> <http://example.org/p> <b> .\n')
        target = self.path('out.nt')
        self.assertEqual(main([source, target]), 0)
        expected = Path(self.tmp.name).resolve().joinpath('a').as_uri()
        self.assertIn('<%s>' % expected, self.read(target))

    def test_syntax_error_reports_position(self):
        source = self.path('in.ttl', '<http://example.org/s> '
                                     '<http://example.org/p> .\n')
        target = self.path('out.nt')
        self.assertEqual(main([source, target]), 1)
        self.assertIn('in.ttl:1:', self.stderr.getvalue())
        self.assertFalse(os.path.exists(target))

    def test_missing_input(self):
        self.assertEqual(main([self.path('absent.ttl'), self.path('o.nt')]), 1)
        self.assertIn('absent.ttl', self.stderr.getvalue())

    def test_stdout_needs_target_format(self):
        source = self.path('in.nt', TRIPLE)
        self.assertEqual(main([source]), 1)
        self.assertIn('--to', self.stderr.getvalue())

    def test_unsupported_target(self):
        source = self.path('in.nt', TRIPLE)
        self.assertEqual(main([source, self.path('out.jsonld')]), 1)
        self.assertIn('JSON-LD', self.stderr.getvalue())

    def test_stdin_to_stdout(self):
        stdin = io.TextIOWrapper(io.BytesIO(TRIPLE.encode('utf-8')),
                                 encoding='utf-8')
        stdout = io.StringIO()
        with mock.patch('sys.stdin', stdin), mock.patch('sys.stdout', stdout):
            self.assertEqual(main(['--from', 'nt', '--to', 'nquads', '-']), 0)
        self.assertEqual(stdout.getvalue(), TRIPLE)
