"""Account Service package.

This package is organized by feature modules (users, profiles, credentials,
otp, ...) with a thin Flask controller layer and service/repository layers.
"""
