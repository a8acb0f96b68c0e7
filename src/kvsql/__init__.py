"""
kvsql - SQL-like commands over an ordered key-value store

Projects tables, columns and rows onto flat key-value namespaces and runs
a small command language (CREATE/USE/INSERT/SELECT/UPDATE/DELETE/DROP)
against them.
"""

__version__ = "0.1.0"
__author__ = "Systems Engineering Portfolio"
