# src/services/payments/__init__.py
"""
Payment Service: COD-платежи по событиям заказа.
"""
