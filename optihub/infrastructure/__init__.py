"""
OptiHub Infrastructure - Cache and content database adapters.
"""
