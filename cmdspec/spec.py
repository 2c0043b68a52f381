import os
import time
import random
import logging
import concurrent.futures

import attr

from . import config
from . import grapher
from .report import Result
from .runner import Trial, run_trial, check_abort
from .shrink import Shrinker
from .outcomes import Failure, SIGNATURES
from .error_types import GeneratorExhausted, GenerationError, PreconditionViolation, Aborted

__all__ = [
    'Options',
    'spec',
    'generate_trial',
    'trial_random',
]

log = logging.getLogger('spec')

def _random_seed():
    return int.from_bytes(os.urandom(8), 'big', signed=True)

def _positive(inst, attribute, value):
    if value < 1:
        raise ValueError('{} must be at least 1, got {}'.format(attribute.name, value))

@attr.s
class Options:
    '''Settings of one :func:`spec` run

    - max_trials: trials to run before declaring success
    - seed: 64-bit seed all trials are derived from (random if None)
    - max_shrink_steps: candidate trials the shrink search may run
    - max_commands: longest command sequence generated
    - max_value_shrinks: shrink proposals tried per command or initial state and round
    - signature: which failures count as the same while shrinking, see
      :meth:`cmdspec.outcomes.Failure.signature`
    - workers: trials run concurrently (each on its own system under test)
    - abort: an object with ``is_set()`` (e.g. threading.Event) to stop the run
    - timeout: seconds after which the run is stopped
    '''
    max_trials = attr.ib(default=100, validator=[attr.validators.instance_of(int), _positive])
    seed = attr.ib(default=None, converter=attr.converters.default_if_none(factory=_random_seed))
    max_shrink_steps = attr.ib(default=1000, validator=attr.validators.instance_of(int))
    max_commands = attr.ib(default=50, validator=attr.validators.instance_of(int))
    max_value_shrinks = attr.ib(default=100, validator=attr.validators.instance_of(int))
    signature = attr.ib(default='kind', validator=attr.validators.in_(SIGNATURES))
    workers = attr.ib(default=1, validator=[attr.validators.instance_of(int), _positive])
    abort = attr.ib(default=None)
    timeout = attr.ib(default=None)

def trial_random(seed, index):
    '''The random source of trial 'index', independent of every other trial
    '''
    return random.Random('{}:{}'.format(seed, index))

def generate_trial(model, seed, index, max_commands):
    '''Generate trial number 'index' of a run seeded with 'seed'
    '''
    rng = trial_random(seed, index)
    state = model.generate_initial_state(rng)
    n = rng.randint(0, max_commands)
    return Trial(state, model.generate_commands(rng, state, n))

def _abort_check(options):
    event = options.abort
    deadline = None
    if options.timeout is not None:
        deadline = time.monotonic() + options.timeout

    if event is None and deadline is None:
        return None

    def abort():
        if event is not None and event.is_set():
            return True
        return deadline is not None and time.monotonic() > deadline

    return abort

def _run_one(model, options, index, abort):
    trial = generate_trial(model, options.seed, index, options.max_commands)
    return run_trial(model, trial, abort)

def _outcomes(model, options, abort):
    '''Yield (index, outcome) for every trial, in index order
    '''
    if options.workers == 1:
        for index in range(options.max_trials):
            check_abort(abort)
            yield index, _run_one(model, options, index, abort)
        return

    with concurrent.futures.ThreadPoolExecutor(max_workers=options.workers) as executor:
        for start in range(0, options.max_trials, options.workers):
            check_abort(abort)
            indices = range(start, min(start + options.workers, options.max_trials))
            outs = executor.map(lambda i: _run_one(model, options, i, abort), indices)
            yield from zip(indices, outs)

def _finish(result, reporter, graph):
    if graph is not None and len(graph):
        graph.render(config.CONFIG.graphviz_file)

    if reporter is not None:
        reporter.report(result)

    return result

def spec(model, options=None, reporter=None):
    '''Run trials of the :class:`~cmdspec.model.Model` 'model' (a class or an
    instance) until one fails or `options.max_trials` have passed.

    The first failing trial, by index, is shrunk. Returns a
    :class:`~cmdspec.report.Result`; 'reporter' (e.g.
    :class:`~cmdspec.report.ConsoleReporter`) is told about every trial and
    the final result.
    '''
    options = options or Options()
    if isinstance(model, type):
        model = model()

    name = model.__class__.__name__
    abort = _abort_check(options)
    graph = grapher.Graph() if config.CONFIG.graphviz else None

    log.info('spec{{{}}}: seed={}, max_trials={}'.format(name, options.seed, options.max_trials))

    def result(status, **kwargs):
        return Result(status, trials_run=trials_run, seed=options.seed, name=name, **kwargs)

    trials_run = 0
    failure = None
    try:
        for index, outcome in _outcomes(model, options, abort):
            trials_run = index + 1
            if reporter is not None:
                reporter.trial(index, outcome)

            if isinstance(outcome, Failure):
                failure = outcome
                break
    except (GeneratorExhausted, GenerationError, PreconditionViolation) as e:
        log.error('spec{{{}}}: {}'.format(name, e))
        return _finish(result('error', error=e), reporter, graph)
    except Aborted as e:
        log.info('spec{{{}}}: aborted after {} trial(s)'.format(name, trials_run))
        return _finish(result('aborted', error=e, aborted=True), reporter, graph)

    if failure is None:
        log.info('spec{{{}}}: passed {} trial(s)'.format(name, trials_run))
        return _finish(result('pass'), reporter, graph)

    log.info('spec{{{}}}: trial {} failed: {}'.format(name, trials_run - 1, failure.reason))
    shrinker = Shrinker(
        model,
        failure,
        max_steps=options.max_shrink_steps,
        max_value_shrinks=options.max_value_shrinks,
        signature=options.signature,
        abort=abort,
        graph=graph,
    )
    shrunk = shrinker.shrink()

    return _finish(result(
        'fail',
        failing=failure,
        shrunk=shrunk.shrunk,
        shrink_steps=shrunk.shrinks,
        shrink_candidates=shrunk.candidates,
        aborted=shrunk.aborted,
    ), reporter, graph)
