#!/usr/bin/env python3
import sys

from cmdspec import spec
from cmdspec.queue_example import CircularBufferModel

if __name__ == '__main__':
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else 1234
    result = spec(CircularBufferModel(max_size=100), seed=seed)
    sys.exit(0 if result.passed else 1)
