"""
anotherpass: secondary-password authentication for multi-user login gates.

Each user may register any number of additional passwords. Presenting one of
them at login is accepted independently of the user's primary credential.
"""

__version__ = "1.0.0"
__author__ = "Tyler Zervas"
__email__ = "tz-dev@vectorweight.com"
