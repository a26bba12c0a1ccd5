"""Compile the entities of a ThingWorx project into decorated TypeScript classes."""

# NOTE: Keep this in sync with setup.py.
__version__ = "0.0.1"
__author__ = "twx-ts-codegen developers"
__license__ = "License :: OSI Approved :: MIT License"
__status__ = "Alpha"
