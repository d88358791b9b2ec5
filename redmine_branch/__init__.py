"""Create git branches named after Redmine tickets."""

__version__ = "0.3.0"
