"""Routing: literal routes in a dict, parameterised routes by specificity.

Routes are registered during setup and frozen when the app compiles.
"""
