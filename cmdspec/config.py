import graphviz as gv

class Config:
    '''Configuration object contains settings

    Settings:
    - Config.graphviz: bool
        When True every shrink search records the candidates it ran and
        writes them to `graphviz_file` (and its rendered .svg), adopted
        reductions drawn bold.

    - Config.graphviz_file: str
        Where the shrink graph is written, default 'shrink.gv'

    - Config.graphviz_digraph
        The graphviz.Digraph object the shrink graph is copied from if Config.graphviz is True
    '''
    def __init__(self, graphviz=False, graphviz_file='shrink.gv'):
        self.graphviz = graphviz
        self.graphviz_file = graphviz_file
        self.graphviz_digraph = gv.Digraph(format='svg', comment='Shrink Search') if graphviz else None

CONFIG = Config(graphviz=False)
