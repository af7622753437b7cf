"""Grid path execution engine.

Command queue, ghost projection, run scheduling and the `PathEngine` facade that
owns them. Nothing in here knows about HTTP or Redis.
"""
