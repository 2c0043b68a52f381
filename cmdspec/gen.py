# gen.py - Generators for command arguments and initial states
import abc
import string
import logging

from .error_types import MissingGenError, GeneratorExhausted

log = logging.getLogger('gen')

MIN_INT = -2**63
MAX_INT = 2**63 - 1
LETTERS = string.ascii_lowercase
MAX_DISCARDS = 100

__all__ = [
    'Gen',
    'register',
    'has_gen',
    'get_gen',
    'shrink_int',
    'const',
    'integers',
    'booleans',
    'sampled_from',
    'lists',
    'text',
    'one_of',
    'frequency',
]

def register(t, gen, override=True):
    '''Register a :class:`Gen` instance for type 't'
    '''
    if t in GenMeta.__gens__ and not override:
        raise ValueError('a Gen is already registered for {}'.format(t))

    log.debug('register {} -> {!r}'.format(getattr(t, '__name__', t), gen))
    GenMeta.__gens__[t] = gen

def get_gen(t):
    '''Gets the Gen registered for some type 't'

    A :class:`Gen` instance is returned unchanged, so annotations can name
    either a type or a generator.
    '''
    if isinstance(t, Gen):
        return t

    try:
        return GenMeta.__gens__[t]
    except (KeyError, TypeError):
        name = getattr(t, '__name__', t)
        raise MissingGenError('Cannot get Gen instance for ~{}'.format(name)) from None

def has_gen(t):
    try:
        get_gen(t)
        return True
    except MissingGenError:
        return False

class GenMeta(abc.ABCMeta):
    '''Metaclass for a Gen
    holds the LUT of registered generators so ``Gen[int]`` works
    '''
    # global LUT of all registered generators
    __gens__ = {}

    def __getitem__(cls, t):
        return get_gen(t)

class Gen(metaclass=GenMeta):
    '''A :class:`Gen` is a way of producing random values of some type
    and of proposing simpler alternatives to a value it produced.

    ``generate`` draws only from the `random.Random` it is given, so the same
    stream always gives the same value. ``shrink`` returns a fresh, finite
    iterator of candidates, simplest first.
    '''

    @abc.abstractmethod
    def generate(self, rng):
        '''Draw one value using the random source 'rng'
        '''

    def shrink(self, value):
        return iter(())

    def map(self, f):
        '''A Gen of f(v) for each v of this Gen

        The mapped values do not shrink unless a shrinker is attached with
        :meth:`with_shrinker`.
        '''
        return _MapGen(self, f)

    def such_that(self, p):
        '''Only the values of this Gen for which p(v) holds
        '''
        return _FilterGen(self, p)

    def with_shrinker(self, shrinker):
        '''This Gen with 'shrinker' as its shrink function
        '''
        return _ShrinkerGen(self, shrinker)

    def __repr__(self):
        return '{}()'.format(self.__class__.__name__)

class _MapGen(Gen):
    def __init__(self, gen, f):
        self.gen = gen
        self.f = f

    def generate(self, rng):
        return self.f(self.gen.generate(rng))

    def __repr__(self):
        return '{!r}.map({})'.format(self.gen, getattr(self.f, '__name__', self.f))

class _FilterGen(Gen):
    def __init__(self, gen, p):
        self.gen = gen
        self.p = p

    def generate(self, rng):
        for _ in range(MAX_DISCARDS):
            v = self.gen.generate(rng)
            if self.p(v):
                return v

        raise GeneratorExhausted('{!r} discarded {} values in a row'.format(self, MAX_DISCARDS))

    def shrink(self, value):
        return (v for v in self.gen.shrink(value) if self.p(v))

    def __repr__(self):
        return '{!r}.such_that({})'.format(self.gen, getattr(self.p, '__name__', self.p))

class _ShrinkerGen(Gen):
    def __init__(self, gen, shrinker):
        self.gen = gen
        self.shrinker = shrinker

    def generate(self, rng):
        return self.gen.generate(rng)

    def shrink(self, value):
        return iter(self.shrinker(value))

    def __repr__(self):
        return repr(self.gen)

def _halve(n):
    '''n / 2 rounded toward zero'''
    if n < 0:
        return -(-n // 2)
    return n // 2

def shrink_int(value, target=0, low=MIN_INT, high=MAX_INT):
    '''Bisect 'value' toward 'target'

    i.e.
        list(shrink_int(100)) == [0, 50, 75, 88, 94, 97, 99]
        list(shrink_int(-5)) == [0, 5, -3, -4]

    negative values also propose their absolute value when it is in range.
    '''
    if value == target:
        return

    yield target

    if value < 0 and -value != target and low <= -value <= high:
        yield -value

    half = _halve(value - target)
    while half != 0:
        yield value - half
        half = _halve(half)

class IntGen(Gen):
    def __init__(self, low=MIN_INT, high=MAX_INT):
        if low > high:
            raise ValueError('empty range [{}, {}]'.format(low, high))

        self.low = low
        self.high = high

    @property
    def target(self):
        '''The simplest value in range, the one closest to 0
        '''
        return min(max(0, self.low), self.high)

    def generate(self, rng):
        return rng.randint(self.low, self.high)

    def shrink(self, value):
        return shrink_int(value, self.target, self.low, self.high)

    def __repr__(self):
        return 'integers({}, {})'.format(self.low, self.high)

class BoolGen(Gen):
    def generate(self, rng):
        return rng.random() < 0.5

    def shrink(self, value):
        if value:
            yield False

    def __repr__(self):
        return 'booleans()'

class ConstGen(Gen):
    def __init__(self, value):
        self.value = value

    def generate(self, rng):
        return self.value

    def __repr__(self):
        return 'const({!r})'.format(self.value)

class SampledGen(Gen):
    def __init__(self, elements):
        self.elements = tuple(elements)
        if not self.elements:
            raise ValueError('cannot sample from an empty sequence')

    def generate(self, rng):
        return rng.choice(self.elements)

    def shrink(self, value):
        # earlier elements are simpler
        try:
            i = self.elements.index(value)
        except ValueError:
            return iter(())
        return iter(self.elements[:i])

    def __repr__(self):
        return 'sampled_from({!r})'.format(self.elements)

class ListGen(Gen):
    def __init__(self, elements, min_size=0, max_size=10):
        self.elements = get_gen(elements)
        self.min_size = min_size
        self.max_size = max_size

    def generate(self, rng):
        n = rng.randint(self.min_size, self.max_size)
        return [self.elements.generate(rng) for _ in range(n)]

    def shrink(self, value):
        xs = list(value)
        n = len(xs)

        # drop blocks, biggest first
        k = n // 2 or n
        while k > 0:
            if n - k >= self.min_size:
                for i in range(0, n - k + 1, k):
                    yield xs[:i] + xs[i + k:]
            k //= 2

        for i, x in enumerate(xs):
            for y in self.elements.shrink(x):
                yield xs[:i] + [y] + xs[i + 1:]

    def __repr__(self):
        return 'lists({!r}, {}, {})'.format(self.elements, self.min_size, self.max_size)

class TextGen(ListGen):
    def __init__(self, alphabet=LETTERS, min_size=0, max_size=10):
        super().__init__(SampledGen(alphabet), min_size, max_size)

    def generate(self, rng):
        return ''.join(super().generate(rng))

    def shrink(self, value):
        for xs in super().shrink(list(value)):
            yield ''.join(xs)

    def __repr__(self):
        return 'text({!r}, {}, {})'.format(''.join(self.elements.elements), self.min_size, self.max_size)

class FrequencyGen(Gen):
    '''Pick one of several Gens, weighted

    A value is shrunk by every alternative in turn, earliest first, since
    which one produced it is not recorded. Alternatives that cannot shrink
    a value of its type are skipped.
    '''
    def __init__(self, pairs):
        self.weights = []
        self.gens = []
        for w, g in pairs:
            if w < 0:
                raise ValueError('negative weight {} for {!r}'.format(w, g))
            self.weights.append(w)
            self.gens.append(get_gen(g))

        if not any(self.weights):
            raise ValueError('frequency() needs a positive weight')

    def generate(self, rng):
        g, = rng.choices(self.gens, weights=self.weights)
        return g.generate(rng)

    def shrink(self, value):
        seen = []
        for g in self.gens:
            try:
                vs = list(g.shrink(value))
            except (TypeError, ValueError):
                continue

            for v in vs:
                if v not in seen:
                    seen.append(v)
                    yield v

    def __repr__(self):
        return 'frequency({})'.format(', '.join('({}, {!r})'.format(w, g) for w, g in zip(self.weights, self.gens)))

def const(value):
    return ConstGen(value)

def integers(low=MIN_INT, high=MAX_INT):
    '''Integers in the closed range [low, high], shrinking toward 0
    (or the bound nearest to it)
    '''
    return IntGen(low, high)

def booleans():
    return BoolGen()

def sampled_from(elements):
    return SampledGen(elements)

def lists(elements, min_size=0, max_size=10):
    return ListGen(elements, min_size, max_size)

def text(alphabet=LETTERS, min_size=0, max_size=10):
    return TextGen(alphabet, min_size, max_size)

def one_of(*gens):
    '''Any of 'gens' (Gens or registered types), picked uniformly
    '''
    return FrequencyGen((1, g) for g in gens)

def frequency(*pairs):
    '''One of the Gens of the (weight, gen) 'pairs', picked with probability
    proportional to its weight

    >>> frequency((9, integers(0, 9)), (1, const(None)))
    '''
    return FrequencyGen(pairs)

register(int, integers())
register(bool, booleans())
register(str, text())
