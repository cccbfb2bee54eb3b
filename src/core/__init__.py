"""Feral Friends core engine"""
__version__ = "0.1.0"
