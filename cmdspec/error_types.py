class CmdSpecError(Exception):
    pass

class MissingGenError(CmdSpecError):
    pass

class GeneratorExhausted(CmdSpecError):
    '''No legal value could be generated

    Raised when every command of a model has a failing pre-condition for some
    reachable state, or when no initial state satisfies `initial_pre`.
    '''
    def __init__(self, msg, state=None):
        super().__init__(msg)
        self.state = state

class PreconditionViolation(CmdSpecError):
    '''A sequence reached a command whose pre-condition does not hold

    Generated and shrunk sequences are always valid, so this points at a bug in
    the engine or in a custom command generator, never in the system under test.
    '''
    def __init__(self, index, partial, state):
        super().__init__('{{{}}}: pre-condition false at step {} in state {}'.format(partial, index, state))
        self.index = index
        self.partial = partial
        self.state = state

class GenerationError(CmdSpecError):
    '''The model raised while a trial was being generated

    e.g. a pre-condition or state-transition function throwing; the original
    exception is the __cause__.
    '''
    def __init__(self, msg, index=None):
        super().__init__(msg)
        self.index = index

class Aborted(CmdSpecError):
    pass
