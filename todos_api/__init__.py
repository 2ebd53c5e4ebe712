"""
Todo list API package.

This package provides a FastAPI application where each account owns a
private todo list, gated by signed bearer tokens issued at login and
registration.
"""
