"""asma: spaced-learning engine for the 99 Names."""

from asma.consts import VERSION

__version__ = VERSION
