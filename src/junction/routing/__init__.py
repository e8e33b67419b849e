"""Routing: mount-point layers and the dispatcher that walks them.

Layers are registered in order during setup; the dispatcher freezes the
list on its first request and tries the layers in that order for every
request.
"""
