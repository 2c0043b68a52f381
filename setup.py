#!/usr/bin/env python
from setuptools import setup, find_packages

with open('README.rst') as f:
    long_description = f.read()

setup(
    name='cmdspec',
    version='0.1.0',
    description='Stateful, model-based property testing with shrinking',
    long_description=long_description,
    packages=find_packages(exclude=('tests', 'docs', 'examples')),
    install_requires=[
        'attrs>=19.2',
        'graphviz',
    ],
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.7',
)
