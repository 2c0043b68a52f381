import logging
import logging.config

import sys

from .gen import *
from .model import *
from .asserts import *
from .outcomes import *
from .runner import *
from .shrink import *
from .report import *
from .testcase import *
from .error_types import *
from . import spec as specM
from .spec import Options, generate_trial

def spec(model, outfile=sys.stdout, **options):
    '''Runs cmdspec on some model (a Model class or instance), printing
    the report to 'outfile' (nothing if outfile is None)

    keyword arguments are :class:`~cmdspec.spec.Options`
    '''
    reporter = ConsoleReporter(outfile) if outfile is not None else None
    return specM.spec(model, Options(**options), reporter=reporter)

def enableLogging(debug=False):
    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,

        'formatters': {
            'default': {
                'format': '[{asctime}] {levelname}, {name}: {message}',
                'datefmt': '%Y/%m/%d %H:%M:%S',
                'style': '{',
            },
        },

        'handlers': {
            'stdout': {
                'class': 'logging.StreamHandler',
                'formatter': 'default',
                'stream': 'ext://sys.stdout',
            },
        },

        'root': {
            'level': logging.DEBUG if debug else logging.INFO,
            'handlers': ['stdout'],
        },
    })
