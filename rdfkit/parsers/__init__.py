__all__ = ['ntriples_parser', 'nquads_parser', 'turtle_parser', 'trig_parser',
           'n3_parser', 'rdfjson_parser']

from .lark import (
    n3_parser,
    nquads_parser,
    ntriples_parser,
    trig_parser,
    turtle_parser,
)
from .rdfjson import rdfjson_parser
