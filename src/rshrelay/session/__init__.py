"""Connection handling for rshrelay.

Accepts one remote shell connection at a time and drives the
command/response cycle with the operator until the session ends.
"""
