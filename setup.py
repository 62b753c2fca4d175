import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='fleet-server',
    version='1.0.0',
    license='MIT',
    description='Coordinates the rentals, maintenance and group rides of a bicycle fleet.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires='>=3.9',
    install_requires=[
        'aiohttp',
        'uvloop',
        'tortoise-orm>=0.21,<1',
        'aiosqlite',
        'marshmallow>=3.18',
        'shapely',
        'sentry-sdk',
    ],
    extras_require={
        'postgres': ['asyncpg'],
        'test': ['pytest', 'Faker'],
    },
    entry_points={
        'console_scripts': ['fleet=fleet.cli:run'],
    },
)
