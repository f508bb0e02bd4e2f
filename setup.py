#!/usr/bin/env python3

import os
from setuptools import setup, find_packages


BASE_DIR = os.path.abspath(os.path.dirname(__file__))
try:
    with open(os.path.join(BASE_DIR, 'README.rst')) as fp:
        README = fp.read()
except IOError:
    README = ''

setup(name='then-promise',
      version='0.0.1',
      description='Chainable promises with lazy, run-once producers',
      long_description=README,
      classifiers=[
          'Development Status :: 3 - Alpha'
      ],
      keywords='promise deferred future callback',
      author='dead-beef',
      license='MIT',
      packages=find_packages(include=('then*',)),
      entry_points={
          'console_scripts': ['then-demo=then.cli:main'],
      },
      install_requires=[],
      extras_require={
          'dev': [
              'pytest',
              'pytest-mock',
              'coverage',
              'twine>=1.8.1',
              'wheel'
          ]
      },
      python_requires='>=3.6',
      include_package_data=True,
      zip_safe=False)
