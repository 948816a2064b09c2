# This file is part of the CERN Indico plugins.
# Copyright (C) 2014 - 2026 CERN
#
# The CERN Indico plugins are free software; you can redistribute
# them and/or modify them under the terms of the MIT License; see
# the LICENSE file for more details.

from setuptools import find_packages, setup


setup(
    name='bigbluebuttonbn-generator',
    version='1.0-dev',
    url='https://github.com/indico/indico-plugins-cern',
    license='MIT',
    author='Indico Team',
    author_email='indico-team@cern.ch',
    packages=find_packages(exclude=['tests']),
    include_package_data=True,
    zip_safe=False,
    install_requires=[
        'click>=8.0',
        'lxml>=4.9',
        'requests>=2.28',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-mock>=3.10',
            'responses>=0.23',
        ],
    },
    python_requires='>=3.10',
    entry_points={
        'console_scripts': {'bbb-generator = bigbluebuttonbn_generator.cli:cli'}
    },
    classifiers=[
        'Environment :: Console',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3.10',
    ],
)
