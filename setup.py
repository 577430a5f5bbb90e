#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import setup, find_packages
import iiif_processor
import os


VERSION = iiif_processor.__version__


def local_file(name):
    return os.path.relpath(os.path.join(os.path.dirname(__file__), name))


# We use requirements.txt so we can provide a deterministic set of packages
# to be installed, not the latest version that happens to be available.
with open(local_file('requirements.txt')) as f:
    install_requires = [line.strip() for line in f if line.strip()]


def _read(fname):
    with open(local_file(fname)) as f:
        return f.read()


setup(
    name='iiif-processor',
    description=('Request processing core for IIIF Image API 2.1 and 3.0 servers'),
    long_description=_read('README.md'),
    long_description_content_type='text/markdown',
    license='Simplified BSD',
    version=VERSION,
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>=3.8',
    install_requires=install_requires,
    extras_require={
        'test': ['pytest', 'mock', 'hypothesis', 'responses'],
    },
)
