# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Staticop — Static Operator Core                                     ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""
Staticop build configuration.

Pure Python; the CPU backend runs on NumPy and the CUDA backend on CuPy,
which is installed through the ``cuda`` extra.

Build
-----
    pip install -e .                          # editable install
    pip install -e '.[dev]'                   # with test tooling
    pip install -e '.[cuda]'                  # with the CuPy backend
    python -m build                           # wheel

The repository root *is* the ``staticop`` package; ``package_dir`` maps
it and its sub-packages explicitly.
"""
import os

from setuptools import setup

# ── Package metadata ──
_readme = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'README.md')
try:
    with open(_readme, 'r', encoding='utf-8') as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = ''

setup(
    name='staticop',
    version='0.1.0',
    author='Pictofeed, LLC',
    author_email='engineering@pictofeed.io',
    description=(
        'Static graph operators with explicit shape, dependency and '
        'in-place contracts — NumPy + CuPy backends'
    ),
    long_description=long_description,
    long_description_content_type='text/markdown',
    url='https://github.com/pictofeed/staticop',
    license='Proprietary',

    package_dir={
        'staticop': '.',
        'staticop.backends': 'backends',
        'staticop.ops': 'ops',
    },
    packages=[
        'staticop',
        'staticop.backends',
        'staticop.ops',
    ],

    python_requires='>=3.10',
    install_requires=[
        'numpy>=1.24',
    ],
    extras_require={
        'dev': [
            'pytest>=7.0',
        ],
        'cuda': [
            'cupy>=12.0',
        ],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: Other/Proprietary License',
        'Operating System :: MacOS :: MacOS X',
        'Operating System :: POSIX :: Linux',
        'Operating System :: Microsoft :: Windows',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Topic :: Scientific/Engineering :: Artificial Intelligence',
    ],
    zip_safe=False,
)
