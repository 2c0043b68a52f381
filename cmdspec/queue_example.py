'''A bounded circular buffer and its model

:class:`CircularBuffer` has a deliberate bug: when the write index wraps
around, the value just stored in the last slot is multiplied by ``n + 1``.
It only shows once a buffer has been filled past its end and read back
that far, which takes a dozen or so well-ordered commands.
'''
import attr

from . import gen
from .model import Model, command
from .asserts import assertEqual

__all__ = [
    'CircularBuffer',
    'FixedCircularBuffer',
    'OffByOneBuffer',
    'BufferState',
    'CircularBufferModel',
]

class CircularBuffer:
    def __init__(self, n):
        self.inp = 0
        self.outp = 0
        self.slots = n + 1
        self.buf = [0] * (n + 1)

    def put(self, n):
        self.buf[self.inp] = n
        self.inp = (self.inp + 1) % self.slots
        if self.inp == 0:
            self.buf[self.slots - 1] *= (n + 1)
        return n

    def get(self):
        ans = self.buf[self.outp]
        self.outp = (self.outp + 1) % self.slots
        return ans

    def size(self):
        return (self.inp - self.outp + self.slots) % self.slots

    def reset(self):
        self.inp = 0
        self.outp = 0

class FixedCircularBuffer(CircularBuffer):
    def put(self, n):
        self.buf[self.inp] = n
        self.inp = (self.inp + 1) % self.slots
        return n

class OffByOneBuffer(FixedCircularBuffer):
    def size(self):
        return super().size() + 1

@attr.s(frozen=True)
class BufferState:
    capacity = attr.ib()
    elements = attr.ib(default=(), converter=tuple)

    def __str__(self):
        return 'State(size={}, elements={})'.format(self.capacity, list(self.elements))

def shrink_state(state):
    '''Smaller capacities first, then fewer pre-loaded elements
    '''
    n = len(state.elements)
    for capacity in gen.shrink_int(state.capacity, target=max(n, 1), low=max(n, 1)):
        yield BufferState(capacity, state.elements)

    for i in range(n):
        yield BufferState(state.capacity, state.elements[:i] + state.elements[i + 1:])

class CircularBufferModel(Model):
    '''Model of a circular buffer of some capacity between 1 and 'max_size'

    The state is a :class:`BufferState`: the capacity and the elements the
    buffer should hold, oldest first.
    '''
    buffer = CircularBuffer

    def __init__(self, max_size=100):
        self.max_size = max_size

    def initial_state(self):
        return gen.integers(1, self.max_size).map(BufferState).with_shrinker(shrink_state)

    def initial_pre(self, state):
        return 0 <= len(state.elements) <= state.capacity

    def new_sut(self, state):
        q = self.buffer(state.capacity)
        for e in state.elements:
            q.put(e)
        return q

    def destroy_sut(self, q):
        q.reset()

    @command
    def get(self, q):
        return q.get()

    def get_pre(self, state, args):
        # the buffer does not guard against reading when empty
        return len(state.elements) > 0

    def get_post(self, state, args, result):
        assertEqual(result, state.elements[0])

    def get_next(self, state, args):
        return attr.evolve(state, elements=state.elements[1:])

    @command
    def put(self, q, value: int):
        return q.put(value)

    def put_pre(self, state, args):
        return len(state.elements) < state.capacity

    def put_post(self, state, args, result):
        value, = args
        return result == value

    def put_next(self, state, args):
        value, = args
        return attr.evolve(state, elements=state.elements + (value,))

    @command
    def size(self, q):
        return q.size()

    def size_post(self, state, args, result):
        assertEqual(result, len(state.elements))
