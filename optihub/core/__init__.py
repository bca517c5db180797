"""
OptiHub Core - Models, errors, progress and cancellation.
"""
