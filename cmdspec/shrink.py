# shrink.py - Search for a smaller trial failing the same way
import logging
import itertools
import collections

import attr

from .runner import Trial, run_trial, check_abort
from .outcomes import Failure, SIGNATURES
from .error_types import Aborted

__all__ = [
    'Shrinker',
    'ShrinkResult',
]

log = logging.getLogger('shrink')

@attr.s
class ShrinkResult:
    original = attr.ib()
    shrunk = attr.ib()
    shrinks = attr.ib(default=0)
    candidates = attr.ib(default=0)
    discarded = attr.ib(default=0)
    exhausted = attr.ib(default=False)
    aborted = attr.ib(default=False)

class Shrinker:
    '''Greedy hill-climb from a failing trial to a locally minimal one

    Every round builds a worklist of candidate trials derived from the
    current smallest failure, in a fixed order:

    1. the commands up to and including the failing step
    2. the sequence with a block of n/2, n/4, ..., 1 commands removed
    3. one command replaced by a simpler one (its arguments shrunk)
    4. a simpler initial state

    Candidates that are not valid for the model are discarded without being
    run. The first candidate that fails with the same signature becomes the
    new target and the worklist is rebuilt; the search ends when a round has
    no such candidate, after 'max_steps' candidates have been run, or when
    'abort()' becomes true.
    '''
    def __init__(self, model, failure, max_steps=1000, max_value_shrinks=100, signature='kind',
                 abort=None, graph=None):
        if signature not in SIGNATURES:
            raise ValueError('unknown signature policy {!r}'.format(signature))

        self.model = model
        self.original = failure
        self.target = failure
        self.max_steps = max_steps
        self.max_value_shrinks = max_value_shrinks
        self.policy = signature
        self.abort = abort
        self._signature = failure.signature(signature)

        self.shrinks = 0
        self.candidates = 0
        self.discarded = 0
        self.exhausted = False

        self.graph = graph
        self._node = None
        if graph is not None:
            self._node = graph.add(_label(failure.trial, failure), style='bold')

    def reproduces(self, outcome):
        return isinstance(outcome, Failure) and outcome.signature(self.policy) == self._signature

    def _truncate(self, trial, failure):
        if failure.index is not None and failure.index + 1 < len(trial):
            yield Trial(trial.initial_state, trial.commands[:failure.index + 1])

    def _delete_blocks(self, trial):
        cmds = trial.commands
        n = len(cmds)
        k = n // 2 or n

        while k > 0:
            for i in range(0, n - k + 1, k):
                yield Trial(trial.initial_state, cmds[:i] + cmds[i + k:])
            k //= 2

    def _shrink_commands(self, trial):
        cmds = trial.commands
        for i, partial in enumerate(cmds):
            for smaller in itertools.islice(partial.shrinks(), self.max_value_shrinks):
                yield Trial(trial.initial_state, cmds[:i] + (smaller,) + cmds[i + 1:])

    def _shrink_initial_state(self, trial):
        states = self.model.initial_state().shrink(trial.initial_state)
        for state in itertools.islice(states, self.max_value_shrinks):
            yield Trial(state, trial.commands)

    def _worklist(self):
        trial = self.target.trial
        return collections.deque([
            self._truncate(trial, self.target),
            self._delete_blocks(trial),
            self._shrink_commands(trial),
            self._shrink_initial_state(trial),
        ])

    @staticmethod
    def _next_candidate(worklist):
        while worklist:
            try:
                return next(worklist[0])
            except StopIteration:
                worklist.popleft()
        return None

    def _record(self, candidate, outcome, adopted):
        if self.graph is None:
            return

        node = self.graph.add(_label(candidate, outcome), **({'style': 'bold'} if adopted else {}))
        self.graph.edge(self._node, node)
        if adopted:
            self._node = node

    def _search(self):
        worklist = self._worklist()

        while True:
            candidate = self._next_candidate(worklist)
            if candidate is None:
                log.debug('local minimum after {} shrinks'.format(self.shrinks))
                return

            if self.candidates >= self.max_steps:
                log.info('shrink budget of {} candidates exhausted'.format(self.max_steps))
                self.exhausted = True
                return

            check_abort(self.abort)

            if not self.model.is_valid(candidate.initial_state, candidate.commands):
                self.discarded += 1
                continue

            self.candidates += 1
            outcome = run_trial(self.model, candidate, self.abort)
            adopted = self.reproduces(outcome)
            self._record(candidate, outcome, adopted)

            if adopted:
                log.debug('shrink #{}: {} commands'.format(self.shrinks + 1, len(candidate)))
                self.target = outcome
                self.shrinks += 1
                worklist = self._worklist()

    def shrink(self):
        aborted = False
        try:
            self._search()
        except Aborted:
            log.info('shrink search aborted after {} candidates'.format(self.candidates))
            aborted = True

        return ShrinkResult(
            original=self.original,
            shrunk=self.target,
            shrinks=self.shrinks,
            candidates=self.candidates,
            discarded=self.discarded,
            exhausted=self.exhausted,
            aborted=aborted,
        )

def _label(trial, outcome):
    status = 'FAIL' if isinstance(outcome, Failure) else 'pass'
    return '{} {}\n{}'.format(status, trial.initial_state, trial.pretty)
