import argparse
import logging
import os
import sys

import graphviz

from . import data
from . import graph
from . import render
from .errors import UgraphError

logger = logging.getLogger(__name__)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )
    try:
        with data.change_git_dir(**repo_location()):
            k(args)
    except (UgraphError, graphviz.ExecutableNotFound, graphviz.CalledProcessError) as e:
        print(f'ugraph: error: {e}', file=sys.stderr)
        sys.exit(1)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='ugraph',
        description='Print the object graph of a ugit repository as Graphviz DOT.')
    parser.add_argument('roots', nargs='*', metavar='root',
                        help='reference name or object id to start from '
                             '(default: every object and reference)')
    parser.add_argument('--no-color', action='store_true',
                        help='suppress filling graph nodes with color')
    parser.add_argument('--no-types', action='store_true',
                        help='suppress labeling graph nodes with object types')
    parser.add_argument('-o', '--output',
                        help='render with dot into this file instead of printing DOT')
    parser.add_argument('-T', '--format',
                        help='output format for --output (default: from the file suffix)')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser.parse_args(argv)


def repo_location():
    if git_dir := os.environ.get('UGIT_DIR'):
        return {'git_dir': git_dir}
    return {'work_tree': os.environ.get('UGIT_WORK_TREE') or os.getcwd()}


def k(args):
    state = graph.walk(args.roots)
    dot = render.render(state, no_color=args.no_color, no_types=args.no_types)

    if args.output is None:
        sys.stdout.write(dot.source)
        return

    output_file_name = dot.render(outfile=args.output, format=args.format, cleanup=True)
    logger.info('rendered %s', output_file_name)
    print(f'graph available at {output_file_name}', file=sys.stderr)
