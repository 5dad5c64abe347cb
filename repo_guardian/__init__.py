"""
Repo Guardian

A GitHub App webhook receiver that protects the default branch of every
newly created repository and opens an issue announcing the protection.
"""

__version__ = "1.0.0"
__author__ = "Repo Guardian Team"
