"""Routing — ordered route table with path-variable matching.

Routes are registered during setup and frozen when the app freezes.
The first registered route that matches a request wins.
"""
