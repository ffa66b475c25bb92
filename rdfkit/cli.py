"""rdfkit command line: convert between RDF syntaxes.

    rdfkit data.ttl data.nt
    rdfkit --from trig --to nquads - - < data.trig
"""
import argparse
import logging
import sys
from pathlib import Path

from rdfkit.exceptions import RDFError, ReadWriteError, UnsupportedFormat
from rdfkit.formats import Format

log = logging.getLogger(__name__)

# Writers that take the Turtle layout options.
TURTLE_FAMILY = (Format.TURTLE, Format.TRIG, Format.N3)
LINE_BASED = (Format.NTRIPLES, Format.NQUADS)


def build_parser():
    parser = argparse.ArgumentParser(
        prog='rdfkit',
        description='Convert RDF between N-Triples, N-Quads, Turtle, TriG, '
                    'N3 and RDF/JSON, or draw it as GraphViz DOT.')
    parser.add_argument('input', help="Input file path, or '-' for stdin.")
    parser.add_argument('output', nargs='?', default='-',
                        help="Output file path, or '-' for stdout (default).")
    parser.add_argument('--from', dest='source_format', default=None,
                        help='Input format. If omitted, inferred from the '
                             'input extension.')
    parser.add_argument('--to', dest='target_format', default=None,
                        help='Output format. If omitted, inferred from the '
                             'output extension.')
    parser.add_argument('--base', default=None,
                        help='Base IRI for the input (default: the input '
                             'file URI).')
    parser.add_argument('--sparql-style', action='store_true',
                        help='Write PREFIX/BASE instead of @prefix/@base.')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log progress at DEBUG level.')
    return parser


def resolve_formats(args):
    if args.source_format:
        source = Format.from_name(args.source_format)
    elif args.input == '-':
        raise UnsupportedFormat('Reading stdin needs --from')
    else:
        source = Format.from_path(args.input)

    if args.target_format:
        target = Format.from_name(args.target_format)
    elif args.output == '-':
        raise UnsupportedFormat('Writing stdout needs --to')
    else:
        target = Format.from_path(args.output)
    return source, target


def guess_base(path, base):
    if base is not None or path == '-':
        return base
    return Path(path).resolve().as_uri()


def writer_options(target, args):
    if target in TURTLE_FAMILY:
        return {'sparql_style': args.sparql_style}
    if target in LINE_BASED:
        return {'star': True}
    return {}


def read_input(path, source, base):
    if path == '-':
        return source.read(sys.stdin.buffer, base=base)
    try:
        with open(path, 'rb') as f:
            return source.read(f, base=base)
    except OSError as exc:
        raise ReadWriteError('Cannot read %s: %s'
                             % (path, exc.strerror or exc)) from exc


def write_output(graph, path, target, options):
    if path == '-':
        target.write(graph, sys.stdout, **options)
        return
    try:
        with open(path, 'w', encoding='utf-8', newline='') as f:
            target.write(graph, f, **options)
    except OSError as exc:
        raise ReadWriteError('Cannot write %s: %s'
                             % (path, exc.strerror or exc)) from exc


def diagnostic(path, exc):
    name = '<stdin>' if path == '-' else path
    if exc.line is not None and exc.column is not None:
        return '%s:%s' % (name, exc)
    return '%s: %s' % (name, exc)


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s')

    try:
        source, target = resolve_formats(args)
        base = guess_base(args.input, args.base)
        log.debug('Converting %s (%s) to %s (%s)', args.input, source.label,
                  args.output, target.label)
        graph = read_input(args.input, source, base)
        write_output(graph, args.output, target, writer_options(target, args))
    except RDFError as exc:
        log.debug('Conversion failed', exc_info=True)
        print(diagnostic(args.input, exc), file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
