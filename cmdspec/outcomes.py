import abc

__all__ = [
    'Outcome',
    'Success',
    'Failure',
    'Passed',
    'Falsified',
    'Errored',
    'SIGNATURES',
]

SIGNATURES = ('any', 'kind', 'command')

class Outcome(abc.ABC):
    '''The result of running one :class:`~cmdspec.runner.Trial`
    '''
    def __init__(self, trial):
        self.trial = trial

    @abc.abstractproperty
    def reason(self):
        '''Reason for Outcome
        '''

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.reason)

class Success(Outcome):
    @property
    def reason(self):
        return 'N/A'

class Passed(Success):
    def __init__(self, trial, state):
        super().__init__(trial)
        self.state = state

class Failure(Outcome):
    '''A failed trial

    'index' is the step that failed, or None when the trial failed
    before (or after) running any command.
    '''
    def __init__(self, trial, index=None, state=None, assertions=None):
        super().__init__(trial)
        self.index = index
        self.state = state
        self._asserts = assertions or []

    @property
    def assertions(self):
        '''The list of assertion messages that *passed* during the failing
        post-condition
        '''
        return self._asserts

    @property
    def partial(self):
        if self.index is None:
            return None
        return self.trial.commands[self.index]

    @abc.abstractproperty
    def kind(self):
        '''What went wrong, independent of where
        '''

    def signature(self, policy='kind'):
        '''The identity of this failure under a shrinking policy

        'any'       every failure is the same failure
        'kind'      failures of the same kind are the same
        'command'   failures of the same kind in the same command are the same
        '''
        if policy == 'any':
            return ()
        if policy == 'kind':
            return (self.kind,)
        if policy == 'command':
            return (self.kind, self.partial.name if self.partial else None)
        raise ValueError('unknown signature policy {!r}, expected one of {}'.format(policy, SIGNATURES))

class Falsified(Failure):
    '''A post-condition did not hold'''
    def __init__(self, trial, index, state, result, message=None, assertions=None):
        super().__init__(trial, index, state, assertions)
        self.result = result
        self.message = message or 'post-condition of {} false'.format(trial.commands[index])

    @property
    def kind(self):
        return 'falsified'

    @property
    def reason(self):
        return self.message

class Errored(Failure):
    '''An exception escaped the system under test or the model

    'phase' is one of 'new_sut', 'pre', 'run', 'post', 'next' or 'destroy_sut'
    '''
    def __init__(self, trial, exception, phase, index=None, state=None):
        super().__init__(trial, index, state)
        self.exception = exception
        self.phase = phase

    @property
    def kind(self):
        t = type(self.exception)
        return '{}.{}'.format(t.__module__, t.__qualname__)

    @property
    def reason(self):
        return self.exception
