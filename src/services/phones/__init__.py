# src/services/phones/__init__.py
"""
Phone Service: складские остатки и переиндексация каталога по событиям.
"""
