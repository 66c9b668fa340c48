"""Rollcard: structured chat card data from dice rolls."""  # noqa: N999

__version__ = "0.1.0"
