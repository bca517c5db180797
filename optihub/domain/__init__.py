"""
OptiHub Domain - Classification, duplicate detection, policies and the analysis facade.
"""
