"""Shared Kernel module.

This module contains foundational components that are explicitly shared across
bounded contexts and cross-cutting infrastructure. Changes to this module
affect every context and should be carefully coordinated.
"""
