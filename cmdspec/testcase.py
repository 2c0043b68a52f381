import io
import unittest

from . import spec as specM
from .report import ConsoleReporter

__all__ = [
    'model_testcase',
]

def model_testcase(model, **options):
    '''Make a :class:`unittest.TestCase` checking the Model class 'model'

    keyword arguments are :class:`~cmdspec.spec.Options`. The test fails
    with the printed counterexample; errors raised while generating trials
    are raised out.

    >>> TestQueue = model_testcase(QueueModel, max_trials=200, seed=1)
    '''
    class ModelTest(unittest.TestCase):
        def test_model(self):
            out = io.StringIO()
            result = specM.spec(model, specM.Options(**options), reporter=ConsoleReporter(out))

            # raise other exceptions out
            if result.status == 'error':
                raise result.error

            self.assertTrue(result.passed, out.getvalue())

    name = getattr(model, '__name__', model.__class__.__name__)
    ModelTest.__name__ = 'Test{}'.format(name)
    ModelTest.__qualname__ = ModelTest.__name__
    return ModelTest
