# runner.py - Sequential execution of a command sequence against a model and its SUT
import copy
import logging

import attr

from . import asserts
from .outcomes import Passed, Falsified, Errored
from .error_types import PreconditionViolation, Aborted

__all__ = [
    'Trial',
    'run_trial',
    'check_abort',
]

log = logging.getLogger('runner')

@attr.s(frozen=True)
class Trial:
    '''An initial model state and the sequence of commands to run from it
    '''
    initial_state = attr.ib()
    commands = attr.ib(default=(), converter=tuple)

    def __len__(self):
        return len(self.commands)

    @property
    def sequence(self):
        return [str(p) for p in self.commands]

    @property
    def pretty(self):
        if not self.commands:
            return '<empty>'

        return '\n> '.join(self.sequence)

    def __str__(self):
        return 'initialState={} sequential=[{}]'.format(self.initial_state, ' '.join(self.sequence))

def check_abort(abort):
    if abort is not None and abort():
        raise Aborted('run aborted')

def _destroy(model, sut):
    try:
        model.destroy_sut(sut)
    except Exception as e:
        log.debug('*** ERROR: destroy_sut raised {!r}'.format(e))
        return e
    return None

def _run_commands(model, trial, sut, state, abort):
    for i, partial in enumerate(trial.commands):
        check_abort(abort)

        try:
            legal = partial.pre(model, state)
        except Exception as e:
            log.debug('*** ERROR: pre-condition of {} raised {!r}'.format(partial, e))
            return Errored(trial, e, 'pre', index=i, state=state)

        if not legal:
            raise PreconditionViolation(i, partial, state)

        try:
            result = partial.run(model, sut)
        except Exception as e:
            log.debug('*** ERROR: {} raised {!r}'.format(partial, e))
            return Errored(trial, e, 'run', index=i, state=state)

        log.debug('{} -> {!r}'.format(partial, result))

        assertions = []
        try:
            with asserts.change_assertions_log(assertions):
                ok = partial.post(model, state, result)
        except AssertionError as e:
            log.debug('*** FAIL: Post-condition AssertionError')
            message = str(e) or None
            return Falsified(trial, i, state, result, message=message, assertions=assertions)
        except Exception as e:
            return Errored(trial, e, 'post', index=i, state=state)

        if ok is False:
            log.debug('*** FAIL: Post-condition False')
            return Falsified(trial, i, state, result, assertions=assertions)

        # if passes post-condition, advance to next state
        # next may mutate its input, keep the state it was given
        before = copy.deepcopy(state)
        try:
            state = partial.next(model, state)
        except Exception as e:
            log.debug('*** ERROR: state transition of {} raised {!r}'.format(partial, e))
            return Errored(trial, e, 'next', index=i, state=before)

    return Passed(trial, state)

def run_trial(model, trial, abort=None):
    '''Run the commands of 'trial' against a fresh system under test,
    checking each result against the model

    Returns a :class:`~cmdspec.outcomes.Passed`, :class:`~cmdspec.outcomes.Falsified`
    or :class:`~cmdspec.outcomes.Errored` outcome. The system under test is
    destroyed before returning, whatever happened; if destroying it fails on
    an otherwise passing trial the trial is Errored.

    Raises PreconditionViolation if the sequence is not valid for the model,
    and Aborted if 'abort()' becomes true between two commands.
    '''
    log.debug('* run{{{}}}'.format(trial))
    state = copy.deepcopy(trial.initial_state)

    try:
        sut = model.new_sut(copy.deepcopy(state))
    except Exception as e:
        log.debug('*** ERROR: new_sut raised {!r}'.format(e))
        return Errored(trial, e, 'new_sut', state=state)

    try:
        outcome = _run_commands(model, trial, sut, state, abort)
    finally:
        destroy_error = _destroy(model, sut)

    if destroy_error is not None:
        if isinstance(outcome, Passed):
            return Errored(trial, destroy_error, 'destroy_sut', state=outcome.state)
        log.warning('destroy_sut raised {!r} after {!r}'.format(destroy_error, outcome))

    return outcome
