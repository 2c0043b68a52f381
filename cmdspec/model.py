# model.py - Definition of a Model
import copy
import inspect
import logging
import collections

from . import gen
from . import asserts
from .gen import Gen
from .error_types import CmdSpecError, GeneratorExhausted, GenerationError, MissingGenError

__all__ = [
    'Model',
    'command',
    'CommandGen',
]

log = logging.getLogger('model')

def empty(self, *_):
    return True

def empty_state(self, state, args):
    '''the empty state transition function
    '''
    return state

class Command:
    '''An @property like :class:`Command`
    It acts like @property except instead of getter and setter
    it has pre, post and next for handling state transitions
    and validating current states.

    Given some :class:`Command` 'c', there are accessors for its internal
    methods, ``c.fdo``, ``c.fpre``, ``c.fpost``, ``c.fnext`` for its internal
    command, pre-condition, post-condition and state-transition-function respectively.

    The signatures are::

        fdo(model, sut, *args) -> result
        fpre(model, state, args) -> bool
        fpost(model, state, args, result) -> bool
        fnext(model, state, args) -> state
    '''

    def __init__(self, fdo, fpre=empty, fpost=empty, fnext=empty_state, fname=None, weight=1):
        self._fdo = fdo
        self._fpre = fpre
        self._fpost = fpost
        self._fnext = fnext
        self._arg_gens = None
        self.weight = weight

        try:
            self.name = fname or fdo.__name__
        except AttributeError:
            self.name = fdo.__code__.co_name

    @property
    def fdo(self):
        return self._fdo

    @property
    def fpre(self):
        return self._fpre

    @fpre.setter
    def fpre(self, v):
        self._fpre = v or self._fpre

    @property
    def fpost(self):
        return self._fpost

    @fpost.setter
    def fpost(self, v):
        self._fpost = v or self._fpost

    @property
    def fnext(self):
        return self._fnext

    @fnext.setter
    def fnext(self, v):
        self._fnext = v or self._fnext

    def _replace(self, fpre=None, fpost=None, fnext=None):
        return Command(self.fdo, fpre or self.fpre, fpost or self.fpost, fnext or self.fnext, self.name, self.weight)

    def pre(self, f):
        '''Precondition for this :class:`Command`
        '''
        return self._replace(fpre=f)

    def post(self, f):
        '''Postcondition for this :class:`Command`, checked against the
        state from *before* the command ran
        '''
        return self._replace(fpost=f)

    def next(self, f):
        return self._replace(fnext=f)

    # these are helper functions to the type signature of the `fdo` function

    @property
    def signature(self):
        return inspect.signature(self.fdo)

    @property
    def parameters(self):
        '''The generated parameters, everything after `self` and the system under test
        '''
        return list(self.signature.parameters.values())[2:]

    @property
    def arg_gens(self):
        if self._arg_gens is None:
            gens = []
            for p in self.parameters:
                if p.annotation is inspect.Parameter.empty:
                    msg = '{}: parameter `{}` has no annotation to generate it from'
                    raise MissingGenError(msg.format(self.name, p.name))
                gens.append(gen.get_gen(p.annotation))
            self._arg_gens = tuple(gens)
        return self._arg_gens

    def draw(self, rng):
        '''A :class:`Partial` of this command with freshly generated arguments
        '''
        return Partial(self, tuple(g.generate(rng) for g in self.arg_gens))

    def __call__(self, *args):
        '''
        Call a `Command` object to give values to the arguments
        '''
        self.signature.bind(None, None, *args)
        return Partial(self, args)

    def __get__(self, obj, objtype=None):
        '''Getting a Command from a model instance is looking up its `fdo` method
        '''
        if obj is None:
            return self
        return self.fdo.__get__(obj, objtype)

    def __repr__(self):
        return self.name

class Partial:
    '''A Partially applied :class:`Command`

    One step of a command sequence: the command together with the values
    of its arguments.
    '''

    def __init__(self, command, args=()):
        self.command = command
        self.args = tuple(args)

    @property
    def name(self):
        return self.command.name

    def run(self, model, sut):
        return self.command.fdo(model, sut, *self.args)

    def pre(self, model, state):
        '''True if this step is legal in 'state'

        as with the other hooks, a failed assertion counts as False
        '''
        try:
            with asserts.change_assertions_log(None):
                return self.command.fpre(model, state, self.args) is not False
        except AssertionError:
            return False

    def post(self, model, state, result):
        return self.command.fpost(model, state, self.args, result)

    def next(self, model, state):
        return self.command.fnext(model, state, self.args)

    def shrinks(self):
        '''Simpler versions of this step, one argument shrunk at a time
        '''
        gens = self.command.arg_gens
        for i, (g, v) in enumerate(zip(gens, self.args)):
            for w in g.shrink(v):
                yield Partial(self.command, self.args[:i] + (w,) + self.args[i + 1:])

    def __eq__(self, other):
        if not isinstance(other, Partial):
            return NotImplemented
        return self.command.name == other.command.name and self.args == other.args

    __hash__ = None

    def __str__(self):
        if not self.args:
            return self.name

        argstr = ', '.join(map(repr, self.args))
        return '%s(%s)' % (self.name, argstr)

    def __repr__(self):
        argstr = ', '.join([repr(self.command), repr(self.args)])
        return '%s(%s)' % (self.__class__.__name__, argstr)

def command(f=None, *, weight=1, name=None):
    '''Decorator to make the function a :class:`Command`.

    Allowing easy definition of pre- and post- conditions as well as
    state transitions in a stateful model.

    >>> class M(Model):
    ...     @command
    ...     def get(self, sut):
    ...         return sut.get()
    ...
    ...     @command(weight=2)
    ...     def put(self, sut, v: int):
    ...         return sut.put(v)
    '''
    def decorator(f):
        return Command(f, fname=name, weight=weight)

    if f is None:
        return decorator
    return decorator(f)

class CommandGen(Gen):
    '''Generates the :class:`Partial`'s of a model which are legal in one state

    Picks a command (weighted by ``Command.weight``) and draws its arguments.
    A command whose draws keep failing its pre-condition is no longer offered
    for this state. When no command is left `GeneratorExhausted` is raised.
    '''

    def __init__(self, model, state, commands=None, max_discards=None):
        self.model = model
        self.state = state
        self.commands = tuple(model.__modelcommands__ if commands is None else commands)
        self.max_discards = model.max_discards if max_discards is None else max_discards

    def generate(self, rng):
        choices = [c for c in self.commands if c.weight > 0]

        while choices:
            cmd, = rng.choices(choices, weights=[c.weight for c in choices])
            tries = self.max_discards if cmd.parameters else 1

            for _ in range(tries):
                partial = cmd.draw(rng)
                if partial.pre(self.model, self.state):
                    return partial

            log.debug('{} never legal in state {}'.format(cmd.name, self.state))
            choices.remove(cmd)

        raise GeneratorExhausted('no command can be generated in state {}'.format(self.state), state=self.state)

    def __repr__(self):
        return 'CommandGen({})'.format(', '.join(c.name for c in self.commands))

def _attach_hooks(name, cmd, namespace):
    '''look for _pre, _post and _next methods of command `name` in 'namespace'
    '''
    fpre = namespace.get(name + '_pre', None)
    fpost = namespace.get(name + '_post', None)
    fnext = namespace.get(name + '_next', None)

    if fpre or fpost or fnext:
        return cmd._replace(fpre, fpost, fnext)
    return cmd

class ModelMeta(type):
    '''Metaclass of a :class:`Model`
    collects all the Command's, including inherited ones, up into a tuple to be accessed later
    '''
    def __new__(mcls, name, bases, namespace):
        cmds = collections.OrderedDict()

        for base in bases:
            for attr_name, cmd in getattr(base, '__modelattrs__', ()):
                cmds[attr_name] = cmd

        for attr_name, value in namespace.items():
            if isinstance(value, Command):
                cmds[attr_name] = value

        for attr_name, cmd in list(cmds.items()):
            cmds[attr_name] = _attach_hooks(attr_name, cmd, namespace)

        cls = super().__new__(mcls, name, bases, dict(namespace, **cmds))
        cls.__modelattrs__ = tuple(cmds.items())
        cls.__modelcommands__ = tuple(sorted(cmds.values(), key=lambda c: c.name))
        return cls

class Model(metaclass=ModelMeta):
    '''A :class:`Model` is some state-machine model of
    some system under test (SUT), and the factory for both.

    Subclasses declare the commands with :func:`command` and provide:

    - ``initial_state()``, a :class:`Gen` of starting model states
      (default: the constant ``_STATE``);
    - ``initial_pre(state)``, rejecting generated starting states;
    - ``new_sut(state)``, building a SUT that agrees with 'state';
    - ``destroy_sut(sut)``, releasing it.

    Model states must be deep-copyable; each replay starts from a fresh copy
    of the initial state so transition functions may mutate their input.
    '''
    _STATE = None
    max_discards = gen.MAX_DISCARDS

    def initial_state(self):
        return gen.const(self._STATE)

    def initial_pre(self, state):
        return True

    def new_sut(self, state):
        raise NotImplementedError('{} does not create a system under test'.format(self.__class__.__name__))

    def destroy_sut(self, sut):
        pass

    def command_gen(self, state):
        '''The generator of the next command in 'state'
        '''
        return CommandGen(self, state)

    def generate_initial_state(self, rng):
        g = self.initial_state()

        for _ in range(self.max_discards):
            try:
                state = g.generate(rng)
                ok = self.initial_pre(state)
            except CmdSpecError:
                raise
            except Exception as e:
                msg = '{}: {!r} while generating the initial state'
                raise GenerationError(msg.format(self.__class__.__name__, e)) from e

            if ok:
                return state

        msg = '{}: no initial state met initial_pre in {} tries'
        raise GeneratorExhausted(msg.format(self.__class__.__name__, self.max_discards))

    def generate_commands(self, rng, initial_state, n):
        '''Generate a valid sequence of 'n' commands starting in 'initial_state'

        An exception from the model's own hooks is raised as `GenerationError`.
        '''
        state = copy.deepcopy(initial_state)
        cmds = []

        for i in range(n):
            try:
                partial = self.command_gen(state).generate(rng)
                cmds.append(partial)
                state = partial.next(self, state)
            except CmdSpecError:
                raise
            except Exception as e:
                msg = '{}: {!r} while generating step {} in state {}'
                raise GenerationError(msg.format(self.__class__.__name__, e, i, state), index=i) from e

        return tuple(cmds)

    def is_valid(self, initial_state, commands):
        '''Given a sequence of partials return True if every pre-condition
        holds when replayed from 'initial_state'

        A pre-condition or state transition that raises ends the replay there:
        running the sequence stops at that step too, with the same error.
        An initial state whose `initial_pre` raises is not valid.
        '''
        try:
            if not self.initial_pre(initial_state):
                return False
        except Exception as e:
            log.debug('*** invalid: initial_pre raised {!r}'.format(e))
            return False

        state = copy.deepcopy(initial_state)
        for i, partial in enumerate(commands):
            try:
                legal = partial.pre(self, state)
                if legal:
                    state = partial.next(self, state)
            except Exception as e:
                log.debug('*** replay stopped by {!r} at step {}'.format(e, i))
                return True

            if not legal:
                log.debug('*** invalid: pre-condition of {} false at step {}'.format(partial, i))
                return False

        return True
