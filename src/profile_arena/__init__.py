"""Profile Arena.

Compare pairs of profiles, vote for the stronger one, and keep an Elo
rating for each profile.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
