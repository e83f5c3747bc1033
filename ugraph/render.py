from urllib.parse import quote

from graphviz import Digraph

from . import types
from .graph import WalkState

COLORS: dict[types.ObjectType, str] = {
    'commit': 'yellowgreen',
    'tree': 'tomato',
    'blob': 'gold',
    'tag': 'skyblue',
}

ABBREV_LEN = 6


def node_id(name: str) -> str:
    """Percent-encode `name` so graphviz never reads `node:port` into it."""
    return quote(name, safe='/')


def label(oid: types.OID, kind: types.ObjectType, no_types=False) -> str:
    if no_types:
        return oid[:ABBREV_LEN]
    # dot turns the escaped \n into a line break
    return f'{kind}\\n{oid[:ABBREV_LEN]}'


def render(state: WalkState, no_color=False, no_types=False) -> Digraph:
    node_attr = {'fontname': 'AnonymousPro'}
    if not no_color:
        node_attr['style'] = 'filled'
    dot = Digraph(node_attr=node_attr)

    for kind in ('commit', 'tree', 'blob', 'tag'):
        for oid in sorted(state.objects(kind)):
            attrs = {'label': label(oid, kind, no_types)}
            if kind == 'commit':
                attrs['group'] = 'commits'
            if not no_color:
                attrs['color'] = COLORS[kind]
            dot.node(node_id(oid), **attrs)

    for refname in sorted(state.refs):
        dot.node(node_id(refname), label=refname, shape='note')

    for source, target in state.edges:
        dot.edge(node_id(source), node_id(target))

    return dot


def to_dot(state: WalkState, no_color=False, no_types=False) -> str:
    return render(state, no_color=no_color, no_types=no_types).source
