"""Skills wallet: assignment, progress and admin decisions for member skills."""

__version__ = "1.0.0"
