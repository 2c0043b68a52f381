import sys
import traceback

import attr

from . import outcomes

__all__ = [
    'Result',
    'ConsoleReporter',
]

STATUSES = ('pass', 'fail', 'error', 'aborted')

def _trial_dict(failure):
    return {
        'initial_state': str(failure.trial.initial_state),
        'sequence': failure.trial.sequence,
        'fail_index': failure.index,
        'reason': str(failure.reason),
    }

@attr.s
class Result:
    '''The outcome of a whole run of :func:`cmdspec.spec.spec`

    'failing' is the first failing :class:`~cmdspec.outcomes.Failure`,
    'shrunk' the smallest failure found from it by the shrink search.
    '''
    status = attr.ib(validator=attr.validators.in_(STATUSES))
    trials_run = attr.ib(default=0)
    seed = attr.ib(default=None)
    name = attr.ib(default=None)
    failing = attr.ib(default=None)
    shrunk = attr.ib(default=None)
    shrink_steps = attr.ib(default=0)
    shrink_candidates = attr.ib(default=0)
    error = attr.ib(default=None)
    aborted = attr.ib(default=False)

    @property
    def passed(self):
        return self.status == 'pass'

    def to_dict(self):
        d = {
            'status': self.status,
            'trials_run': self.trials_run,
            'seed': self.seed,
            'shrink_steps': self.shrink_steps,
            'shrink_candidates': self.shrink_candidates,
        }

        if self.failing is not None:
            d['failing_trial'] = _trial_dict(self.failing)

        if self.shrunk is not None:
            d['shrunk_trial'] = _trial_dict(self.shrunk)

        if self.error is not None:
            d['error'] = repr(self.error)

        return d

class ConsoleReporter:
    '''Prints a dot per passing trial and a counterexample report at the end
    '''
    def __init__(self, outfile=sys.stdout):
        self.outfile = outfile
        self.dots = 0

    def trial(self, index, outcome):
        if isinstance(outcome, outcomes.Errored):
            c = 'E'
        elif isinstance(outcome, outcomes.Failure):
            c = 'F'
        else:
            c = '.'

        print(c, flush=True, end='', file=self.outfile)
        self.dots += 1
        if self.dots % 80 == 0:
            print('', file=self.outfile)

    def report(self, result):
        print('', file=self.outfile)

        if result.status == 'pass':
            self._print_success(result)
        elif result.status == 'fail':
            self._print_failure(result)
        else:
            self._print_error(result)

    def _write(self, s=''):
        self.outfile.write(s + '\n')

    def _print_summary(self, result):
        self._write('After {} trial(s), seed {}'.format(result.trials_run, result.seed))
        self._write('In model `{}`'.format(result.name))
        self._write()

    def _print_success(self, result):
        self._write('-' * 80)
        self._write('Found no counterexample')
        self._print_summary(result)
        self._write('OK')

    def _print_trial(self, failure):
        trial = failure.trial
        self._write(' initial state: {}'.format(trial.initial_state))
        self._write(' commands =')
        self._write('> {}'.format(trial.pretty))
        self._write()

        if failure.index is not None:
            self._write(' failing step {}: {}'.format(failure.index, failure.partial))
            self._write(' model state before it: {}'.format(failure.state))

        if isinstance(failure, outcomes.Falsified):
            self._write(' result: {!r}'.format(failure.result))

            if failure.assertions:
                self._write(' passed assertions:')
                for a in failure.assertions:
                    self._write(' >  assert,    {}'.format(a))

            self._write(' failure reason: {}'.format(failure.message))
        elif isinstance(failure, outcomes.Errored):
            self._write(' exception in {}:'.format(failure.phase))
            self._write()
            e = failure.exception
            traceback.print_exception(type(e), e, e.__traceback__, file=self.outfile)

        self._write()

    def _print_failure(self, result):
        self._write('=' * 80)
        self._write('Failure')
        self._print_summary(result)

        self._write('counterexample ({} shrinks, {} candidates tried{}):'.format(
            result.shrink_steps, result.shrink_candidates, ', aborted' if result.aborted else ''))
        self._print_trial(result.shrunk)

        self._write('original counterexample:')
        self._print_trial(result.failing)

        self._write('FAIL')

    def _print_error(self, result):
        self._write('=' * 80)
        self._write('Aborted' if result.status == 'aborted' else 'Error')
        self._print_summary(result)

        e = result.error
        if e is not None:
            traceback.print_exception(type(e), e, e.__traceback__, file=self.outfile)

        self._write('ERROR' if result.status == 'error' else 'ABORTED')
