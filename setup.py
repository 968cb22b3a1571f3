#!/usr/bin/env python
'''
Build/install LArSoft data object utilities for Python

'''

from setuptools import setup, find_packages
setup(
    name = 'lardataobj',
    version = '0.0',
    packages = find_packages(exclude=["*.test", "*.test.*"]),
    install_requires = [
        'Click',
        'pytest',
        'numpy',
    ],
    entry_points = dict(
        console_scripts = [
            'lardataobj = lardataobj.__main__:main',
            'lardataobj-raw = lardataobj.rawdata.__main__:main',
            'lardataobj-recob = lardataobj.recobase.__main__:main',
        ]
    )
)
