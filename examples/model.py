#!/usr/bin/env python3
from cmdspec import *

class MyList:
    '''A "real" list implementation, whose pop forgets to look past 3 items'''
    def __init__(self):
        self._xs = []

    def append(self, v):
        self._xs.append(v)

    def pop(self):
        if len(self._xs) > 3:
            return self._xs.pop(2)
        return self._xs.pop()

class MyModel(Model):
    _STATE = []

    def new_sut(self, state):
        sut = MyList()
        for v in state:
            sut.append(v)
        return sut

    @command
    def append(self, a, v: integers(0, 9)):
        a.append(v)

    @command
    def pop(self, a):
        return a.pop()

    def append_next(self, state, args):
        v, = args
        return state + [v]

    def pop_pre(self, state, args):
        assertNotEqual(state, [])

    def pop_post(self, state, args, result):
        assertEqual(result, state[-1])

    def pop_next(self, state, args):
        state.pop()
        return state

if __name__ == '__main__':
    out = spec(MyModel, max_trials=200)
