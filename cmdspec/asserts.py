import threading
import contextlib

__all__ = [
    'assertTrue',
    'assertFalse',
    'assertThat',
    'assertEqual',
    'assertNotEqual',
    'assertIn',
    'assertNotIn',
    'change_assertions_log',
]

_local = threading.local()

def _current_log():
    return getattr(_local, 'log', None)

@contextlib.contextmanager
def change_assertions_log(log=None):
    '''Collect the messages of passing assertions into the list 'log'
    for the duration of the block (per thread)
    '''
    old_log = _current_log()
    _local.log = log
    try:
        yield log
    finally:
        _local.log = old_log

def _assert(p, succ_m=None, fail_m='_assert'):
    if not p:
        raise AssertionError(fail_m)

    log = _current_log()
    if log is not None:
        if succ_m:
            log.append(succ_m)
        else:
            log.append('¬({})'.format(fail_m))

    return True

# UnitTest style assertions
def assertThat(f, *args, fmt='{name}({argv})', fmt_fail='{name}({argv}) is false'):
    s_args = ', '.join(map(repr, args))

    try:
        name = f.__code__.co_name
    except AttributeError:
        name = str(f)

    return _assert(f(*args), fmt.format(argv=s_args, name=name), fmt_fail.format(argv=s_args, name=name))

def assertTrue(a, fmt='True', fmt_fail='False'):
    return _assert(a, fmt.format(a=a), fmt_fail.format(a=a))

def assertFalse(a, fmt='False', fmt_fail='True'):
    return _assert(not a, fmt.format(a=a), fmt_fail.format(a=a))

def assertEqual(a, b, fmt='{a} == {b}', fmt_fail='{a} != {b}'):
    return _assert(a == b, fmt.format(a=a, b=b), fmt_fail.format(a=a, b=b))

def assertNotEqual(a, b, fmt='{a} != {b}', fmt_fail='{a} == {b}'):
    return _assert(a != b, fmt.format(a=a, b=b), fmt_fail.format(a=a, b=b))

def assertIn(a, b, fmt='{a} in {b}', fmt_fail='{a} not in {b}'):
    return _assert(a in b, fmt.format(a=a, b=b), fmt_fail.format(a=a, b=b))

def assertNotIn(a, b, fmt='{a} not in {b}', fmt_fail='{a} in {b}'):
    return _assert(a not in b, fmt.format(a=a, b=b), fmt_fail.format(a=a, b=b))
