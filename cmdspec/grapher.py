import graphviz as gv

from . import config

class Node:
    def __init__(self, id, name='unknown', **attrs):
        self.id, self.name = id, name
        self.attrs = attrs
        self.edges = []
        self._edge_attrs = {}

    def __repr__(self):
        return 'Node({}, name={})'.format(repr(self.id), repr(self.name))

    def __str__(self):
        return '({})'.format(self.name)

    def __hash__(self):
        return hash(self.id) ^ 0b101010110101101010

    def __eq__(self, other):
        if not isinstance(other, Node):
            return False
        return self.id == other.id

class Graph:
    '''A record of a shrink search

    Every candidate is a node with an edge from the failure it was derived
    from; adopted candidates are drawn bold.
    '''
    def __init__(self, digraph=None):
        self._nodes = []
        self._count = 0
        self.gv = digraph if digraph is not None else config.CONFIG.graphviz_digraph

    def add(self, name, **attrs):
        self._count += 1
        node = Node(str(self._count), name, **attrs)
        self._nodes.append(node)
        return node

    def edge(self, a, b, **attrs):
        a._edge_attrs[b] = attrs
        a.edges.append(b)

    def __len__(self):
        return len(self._nodes)

    def __iter__(self):
        return iter(self._nodes)

    def to_digraph(self):
        if self.gv is None:
            digraph = gv.Digraph(format='svg', comment='Shrink Search')
        else:
            digraph = self.gv.copy()

        for node in self._nodes:
            digraph.node(node.id, label=node.name, **node.attrs)
            for n in node.edges:
                digraph.edge(node.id, n.id, **node._edge_attrs[n])

        return digraph

    def render(self, filename='shrink.gv'):
        return self.to_digraph().render(filename)
