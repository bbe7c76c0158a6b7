"""WanderMart: attractions, reviews and a souvenir marketplace."""

__version__ = "0.1.0"
