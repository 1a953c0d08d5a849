"""
Name resolution helpers for netprobe
"""

from .ptr_resolver import PTRResolver, resolve_names, is_ip

__all__ = ['PTRResolver', 'resolve_names', 'is_ip']
