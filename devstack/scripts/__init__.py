"""
Console entrypoints, one per service operation.
"""
