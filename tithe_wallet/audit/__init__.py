"""Audit logging package."""

from tithe_wallet.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
