"""Compile, diagnose and workspace primitives."""
