import os

from setuptools import find_packages
from setuptools import setup


with open(os.path.join(os.path.dirname(__file__), 'README.rst')) as fp:
    long_description = fp.read()


setup(
    name='grassgis',
    author='The grassgis developers',
    version='1.0.0',
    license='GPLv3',
    description='Run GRASS GIS commands from Python scripts',
    long_description=long_description,
    python_requires='>=3.6',
    packages=find_packages(exclude=['tests*']),
    entry_points={
        'console_scripts': [
            'grassgis=grassgis:main'
        ]
    },
    install_requires=[
        'colorful',
        'docopt',
        'jinja2',
        'toml',
    ],
    tests_require=[
        'pylint',
        'pytest',
    ],
    extras_require={
        'test': [
            'pylint',
            'pytest',
        ]
    },
    keywords='gis grass-gis scripting',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Topic :: Scientific/Engineering :: GIS',
    ],
)
