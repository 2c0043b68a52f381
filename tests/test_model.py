import random
import unittest

import pytest

from cmdspec import *
from cmdspec.model import Partial
from cmdspec.queue_example import CircularBufferModel, BufferState

class Q:
    pass

class SimpleModel(Model):
    _STATE = 0

    def new_sut(self, state):
        return Q()

    @command
    def new(self, q, size: int):
        pass

    @command(weight=3)
    def enqueue(self, q, v: integers(0, 9)):
        pass

    @command(name='deq')
    def dequeue(self, q):
        pass

    @dequeue.pre
    def dequeue(self, state, args):
        return state > 0

    def enqueue_next(self, state, args):
        return state + 1

class ChildModel(SimpleModel):
    def dequeue_post(self, state, args, result):
        return False

class Unannotated(Model):
    @command
    def f(self, sut, x):
        pass

class NeverLegal(Model):
    @command
    def f(self, sut):
        pass

    def f_pre(self, state, args):
        return False

class ModelMetaTestCase(unittest.TestCase):
    def test_collects_commands(self):
        names = [c.name for c in SimpleModel.__modelcommands__]
        self.assertEqual(names, ['deq', 'enqueue', 'new'])

    def test_weight(self):
        self.assertEqual(SimpleModel.enqueue.weight, 3)
        self.assertEqual(SimpleModel.new.weight, 1)

    def test_hooks_by_name(self):
        m = SimpleModel()
        self.assertEqual(SimpleModel.enqueue(4).next(m, 1), 2)

    def test_hooks_by_decorator(self):
        m = SimpleModel()
        self.assertFalse(SimpleModel.dequeue().pre(m, 0))
        self.assertTrue(SimpleModel.dequeue().pre(m, 1))

    def test_inherits_commands(self):
        m = ChildModel()
        self.assertEqual(len(ChildModel.__modelcommands__), 3)
        self.assertIs(ChildModel.dequeue().post(m, 1, None), False)
        # hooks of the parent are kept
        self.assertFalse(ChildModel.dequeue().pre(m, 0))
        self.assertIsNot(SimpleModel.dequeue().post(m, 1, None), False)

    def test_instance_access_is_method(self):
        m = SimpleModel()
        self.assertIsNone(m.enqueue(Q(), 1))

def test_partial_str():
    assert str(CircularBufferModel.put(0)) == 'put(0)'
    assert str(CircularBufferModel.get()) == 'get'
    assert str(SimpleModel.dequeue()) == 'deq'

def test_partial_eq():
    assert CircularBufferModel.put(0) == CircularBufferModel.put(0)
    assert CircularBufferModel.put(0) != CircularBufferModel.put(1)
    assert CircularBufferModel.put(0) != CircularBufferModel.get()

def test_partial_bad_args():
    with pytest.raises(TypeError):
        CircularBufferModel.get(1)

def test_partial_shrinks():
    shrinks = [str(p) for p in CircularBufferModel.put(8).shrinks()]
    assert shrinks == ['put(0)', 'put(4)', 'put(6)', 'put(7)']
    assert list(CircularBufferModel.get().shrinks()) == []

def test_missing_annotation():
    with pytest.raises(MissingGenError):
        Unannotated.f.draw(random.Random(0))

def test_pre_in_state():
    m = CircularBufferModel()
    assert not CircularBufferModel.get().pre(m, BufferState(3))
    assert CircularBufferModel.get().pre(m, BufferState(3, [1]))

def test_command_gen_only_legal():
    m = CircularBufferModel()
    rng = random.Random(0)

    empty = BufferState(2)
    names = {m.command_gen(empty).generate(rng).name for _ in range(100)}
    assert names == {'put', 'size'}

    full = BufferState(2, [1, 2])
    names = {m.command_gen(full).generate(rng).name for _ in range(100)}
    assert names == {'get', 'size'}

def test_command_gen_weights():
    m = SimpleModel()
    rng = random.Random(0)
    names = [m.command_gen(0).generate(rng).name for _ in range(400)]
    assert 'deq' not in names
    assert names.count('enqueue') > names.count('new')

def test_command_gen_exhausted():
    m = NeverLegal()
    with pytest.raises(GeneratorExhausted):
        m.command_gen(None).generate(random.Random(0))

def test_command_gen_zero_discards():
    # commands with arguments get no draws at all, argument-less ones get one
    m = CircularBufferModel()
    g = CommandGen(m, BufferState(2), max_discards=0)
    rng = random.Random(0)
    assert {g.generate(rng).name for _ in range(50)} == {'size'}
    assert CommandGen(m, BufferState(2)).max_discards == m.max_discards

def test_generate_commands_valid():
    m = CircularBufferModel(max_size=5)
    for seed in range(20):
        rng = random.Random(seed)
        state = m.generate_initial_state(rng)
        cmds = m.generate_commands(rng, state, 30)
        assert len(cmds) == 30
        assert m.is_valid(state, cmds)

def test_is_valid():
    m = CircularBufferModel()
    P, G = CircularBufferModel.put, CircularBufferModel.get
    assert m.is_valid(BufferState(1), [P(0), G(), P(1)])
    assert not m.is_valid(BufferState(1), [G()])
    assert not m.is_valid(BufferState(1), [P(0), P(1)])
    assert not m.is_valid(BufferState(1, [1, 2]), [])

def test_initial_state_rejected():
    class NoStart(Model):
        def initial_pre(self, state):
            return False

    with pytest.raises(GeneratorExhausted):
        NoStart().generate_initial_state(random.Random(0))

class BrokenModel(Model):
    '''inc's state transition raises from state 2, dec's pre-condition from state 1
    '''
    _STATE = 0

    def new_sut(self, state):
        return None

    @command
    def inc(self, sut):
        pass

    def inc_next(self, state, args):
        if state >= 2:
            raise KeyError('inc')
        return state + 1

    @command(weight=0)
    def dec(self, sut):
        pass

    def dec_pre(self, state, args):
        if state >= 1:
            raise ValueError('dec')
        return True

def test_is_valid_stops_at_raising_next():
    m = BrokenModel()
    I = BrokenModel.inc
    assert m.is_valid(0, [I(), I(), I()])
    assert m.is_valid(0, [I(), I(), I(), I(), I()])

def test_is_valid_stops_at_raising_pre():
    m = BrokenModel()
    assert m.is_valid(0, [BrokenModel.inc(), BrokenModel.dec()])

def test_is_valid_raising_initial_pre():
    class M(BrokenModel):
        def initial_pre(self, state):
            raise RuntimeError('initial')

    assert not M().is_valid(0, [])

def test_generate_commands_wraps_model_errors():
    m = BrokenModel()
    assert len(m.generate_commands(random.Random(0), 0, 2)) == 2

    with pytest.raises(GenerationError) as e:
        m.generate_commands(random.Random(0), 0, 5)
    assert e.value.index == 2
    assert isinstance(e.value.__cause__, KeyError)

def test_generate_initial_state_wraps_model_errors():
    class M(BrokenModel):
        def initial_pre(self, state):
            raise RuntimeError('initial')

    with pytest.raises(GenerationError) as e:
        M().generate_initial_state(random.Random(0))
    assert isinstance(e.value.__cause__, RuntimeError)
