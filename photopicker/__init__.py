"""photopicker: segment a photo into objects and shuffle-pick one at random."""

__version__ = "0.1.0"
