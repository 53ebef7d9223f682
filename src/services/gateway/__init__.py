# src/services/gateway/__init__.py
"""
API Gateway: административный доступ к предохранителям RPC.
"""
