""" Setup script for h5objects. """
from setuptools import setup

# get the long descriptions from the README.rst file
with open('README.rst') as f:
    long_description = f.read()

# get the version from the __init__.py file
with open('h5objects/__init__.py') as f:
    for line in f:
        if line.startswith('__version__'):
            version = line.strip().split()[-1][1:-1]
            break

setup(
    name='h5objects',
    version=version,
    description='A pure python decoder of HDF5 object headers',
    long_description=long_description,
    license='BSD',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.8',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Scientific/Engineering',
    ],
    packages=['h5objects'],
    install_requires=['numpy'],
    extras_require={'test': ['pytest']},
)
