"""
Template validator: checks workflow template definitions against their
properties sidecars, icons, directory categories and display-name uniqueness.
"""

__version__ = "0.1.0"
