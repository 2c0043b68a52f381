import itertools

import pytest

from cmdspec import *
from cmdspec.grapher import Graph
from cmdspec.runner import Trial, run_trial
from cmdspec.outcomes import Passed, Failure
from cmdspec.queue_example import CircularBufferModel, BufferState

P, G = CircularBufferModel.put, CircularBufferModel.get

SCENARIO = [
    P(0), P(0), P(0), P(0), P(0), G(), P(0), G(),
    G(), G(), P(0), G(), P(1), G(), G(), G(),
]

class Counter:
    def __init__(self):
        self.n = 0

class CounterModel(Model):
    '''state is the number of `inc` commands run so far
    '''
    _STATE = 0

    def new_sut(self, state):
        return Counter()

    @command
    def inc(self, c):
        c.n += 1

    def inc_next(self, state, args):
        return state + 1

    @command
    def op(self, c):
        if c.n == 0:
            raise ValueError('op on zero')
        return c.n

    def op_post(self, state, args, result):
        return result == 0

    @command
    def a(self, c):
        pass

    def a_post(self, state, args, result):
        return state != 2

    @command
    def b(self, c):
        pass

    def b_post(self, state, args, result):
        return state != 0

def _fail(model, trial):
    outcome = run_trial(model, trial)
    assert isinstance(outcome, Failure)
    return outcome

def _scenario_failure():
    return _fail(CircularBufferModel(max_size=7), Trial(BufferState(7), SCENARIO))

def test_shrink_scenario():
    model = CircularBufferModel(max_size=7)
    failure = _scenario_failure()
    result = Shrinker(model, failure).shrink()

    assert result.original is failure
    assert not result.exhausted
    assert not result.aborted
    assert result.shrinks > 0
    assert len(result.shrunk.trial) <= len(SCENARIO)

    # the shrunk trial is valid and still fails the same way
    shrunk = result.shrunk.trial
    assert model.is_valid(shrunk.initial_state, shrunk.commands)
    again = run_trial(model, shrunk)
    assert isinstance(again, Failure)
    assert again.signature() == failure.signature()
    assert again.index == len(shrunk) - 1

def test_shrink_is_locally_minimal():
    model = CircularBufferModel(max_size=7)
    result = Shrinker(model, _scenario_failure()).shrink()
    trial = result.shrunk.trial
    cmds = trial.commands

    def reproduces(candidate):
        if not model.is_valid(candidate.initial_state, candidate.commands):
            return False
        return isinstance(run_trial(model, candidate), Failure)

    for i in range(len(cmds)):
        assert not reproduces(Trial(trial.initial_state, cmds[:i] + cmds[i + 1:]))

    for i, partial in enumerate(cmds):
        for smaller in partial.shrinks():
            assert not reproduces(Trial(trial.initial_state, cmds[:i] + (smaller,) + cmds[i + 1:]))

    for state in model.initial_state().shrink(trial.initial_state):
        assert not reproduces(Trial(state, cmds))

def test_shrink_monotone():
    model = CircularBufferModel(max_size=7)
    graph = Graph()
    failure = _scenario_failure()
    Shrinker(model, failure, graph=graph).shrink()

    # adopted failures only ever get shorter or simpler
    adopted = [n for n in graph if n.attrs.get('style') == 'bold']
    lengths = [n.name.count('\n') for n in adopted]
    assert lengths == sorted(lengths, reverse=True)

def test_shrink_budget():
    model = CircularBufferModel(max_size=7)
    result = Shrinker(model, _scenario_failure(), max_steps=1).shrink()
    assert result.candidates == 1
    assert result.exhausted

def test_shrink_abort():
    failure = _scenario_failure()
    result = Shrinker(CircularBufferModel(max_size=7), failure, abort=lambda: True).shrink()
    assert result.aborted
    assert result.candidates == 0
    assert result.shrunk is failure

def test_shrink_discards_invalid():
    result = Shrinker(CircularBufferModel(max_size=7), _scenario_failure()).shrink()
    # e.g. removing the first half leaves gets on an empty buffer
    assert result.discarded > 0

def test_truncates_after_failure():
    model = CounterModel()
    I, A = CounterModel.inc, CounterModel.a
    failure = _fail(model, Trial(0, [I(), I(), A(), I(), I(), A()]))
    assert failure.index == 2

    result = Shrinker(model, failure).shrink()
    assert result.shrunk.trial.sequence == ['inc', 'inc', 'a']

def test_signature_kind_keeps_kind():
    model = CounterModel()
    failure = _fail(model, Trial(0, [CounterModel.inc(), CounterModel.op()]))
    assert failure.kind == 'falsified'

    result = Shrinker(model, failure, signature='kind').shrink()
    assert result.shrunk.trial.sequence == ['inc', 'op']

def test_signature_any():
    model = CounterModel()
    failure = _fail(model, Trial(0, [CounterModel.inc(), CounterModel.op()]))

    result = Shrinker(model, failure, signature='any').shrink()
    assert result.shrunk.trial.sequence == ['op']
    assert result.shrunk.kind == 'builtins.ValueError'

def test_signature_command():
    model = CounterModel()
    I, A, B = CounterModel.inc, CounterModel.a, CounterModel.b
    failure = _fail(model, Trial(0, [I(), B(), I(), A()]))
    assert failure.partial.name == 'a'

    result = Shrinker(model, failure, signature='kind').shrink()
    assert result.shrunk.trial.sequence == ['b']

    result = Shrinker(model, failure, signature='command').shrink()
    assert result.shrunk.trial.sequence == ['inc', 'inc', 'a']
    assert result.shrunk.partial.name == 'a'

def test_bad_signature():
    with pytest.raises(ValueError):
        Shrinker(CounterModel(), _scenario_failure(), signature='bogus')

def test_shrink_graph():
    graph = Graph()
    result = Shrinker(CircularBufferModel(max_size=7), _scenario_failure(), graph=graph).shrink()

    assert len(graph) == result.candidates + 1
    bold = [n for n in graph if n.attrs.get('style') == 'bold']
    assert len(bold) == result.shrinks + 1
    assert '->' in graph.to_digraph().source

def test_shrinks_initial_state():
    class M(CircularBufferModel):
        def size_post(self, state, args, result):
            return state.capacity < 3

    model = M(max_size=50)
    failure = _fail(model, Trial(BufferState(40, [1, 2]), [CircularBufferModel.size()]))
    result = Shrinker(model, failure).shrink()
    assert result.shrunk.trial.initial_state == BufferState(3)

class RaisingNextModel(Model):
    _STATE = 0

    def new_sut(self, state):
        return Counter()

    @command
    def inc(self, c):
        c.n += 1

    def inc_next(self, state, args):
        if state >= 2:
            raise KeyError('inc')
        return state + 1

def test_shrink_errored_next():
    model = RaisingNextModel()
    failure = _fail(model, Trial(0, [RaisingNextModel.inc()] * 5))
    assert failure.phase == 'next'

    result = Shrinker(model, failure).shrink()
    assert not result.aborted
    assert result.shrunk.trial.sequence == ['inc', 'inc', 'inc']
    assert result.shrunk.kind == 'builtins.KeyError'
    assert result.shrunk.phase == 'next'
